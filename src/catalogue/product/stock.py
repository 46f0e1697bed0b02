"""Stock adjustments made outside checkout."""

import structlog
from sqlalchemy import update
from sqlalchemy.orm import Session

from catalogue.product.browsing import get_product
from catalogue.product.product import Product
from shared.db import utcnow
from shared.errors import NotFound, ValidationFailed

logger = structlog.get_logger(__name__)


def restock_product(session: Session, product_id: str, quantity: int) -> Product:
    """Atomically add ``quantity`` units to a product's stock."""
    if quantity <= 0:
        raise ValidationFailed("Restock quantity must be greater than zero")

    result = session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFound(f"Product {product_id} not found")

    product = get_product(session, product_id, include_inactive=True)
    session.refresh(product)
    logger.info("product_restocked", product_id=product_id, quantity=quantity, stock=product.stock)
    return product


def return_stock(session: Session, quantities: dict[str, int]) -> None:
    """Put units back on the shelf, e.g. for a cancelled order."""
    for product_id in sorted(quantities):
        session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + quantities[product_id], updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
    logger.info("stock_returned", products=sorted(quantities))
