"""Product details editing."""

from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from catalogue.product.browsing import get_product
from catalogue.product.product import Product
from shared.errors import ValidationFailed

logger = structlog.get_logger(__name__)

# Stock only moves through restock and checkout.
EDITABLE_FIELDS = (
    "name",
    "brand",
    "gender",
    "categories",
    "price",
    "discount_percent",
    "description",
    "images",
)


def update_product(session: Session, product_id: str, changes: dict) -> Product:
    """Apply a partial update; keys that are missing or ``None`` are left alone."""
    product = get_product(session, product_id, include_inactive=True)

    updates = {key: changes[key] for key in EDITABLE_FIELDS if changes.get(key) is not None}
    if "price" in updates:
        updates["price"] = Decimal(updates["price"])
    if "name" in updates and not updates["name"].strip():
        raise ValidationFailed("Product name is required")

    try:
        for key, value in updates.items():
            setattr(product, key, value)
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc

    session.flush()
    logger.info("product_updated", product_id=product.id, fields=sorted(updates))
    return product
