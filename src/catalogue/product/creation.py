"""Product creation."""

from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from catalogue.product.product import Gender, Product
from shared.errors import Conflict, ValidationFailed

logger = structlog.get_logger(__name__)


def create_product(
    session: Session,
    *,
    name: str,
    brand: str,
    price: Decimal,
    gender: str = Gender.UNISEX.value,
    categories: list[str] | None = None,
    discount_percent: int = 0,
    stock: int = 0,
    description: str | None = None,
    images: list[str] | None = None,
    product_id: str | None = None,
) -> Product:
    if not name.strip():
        raise ValidationFailed("Product name is required")
    if stock < 0:
        raise ValidationFailed("Stock cannot be negative")
    if product_id is not None and session.get(Product, product_id) is not None:
        raise Conflict(f"Product {product_id} already exists")

    try:
        product = Product(
            name=name.strip(),
            brand=brand.strip(),
            gender=gender,
            categories=categories or [],
            price=Decimal(price),
            discount_percent=discount_percent,
            stock=stock,
            description=description,
            images=images or [],
        )
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc
    if product_id is not None:
        product.id = product_id

    session.add(product)
    session.flush()
    logger.info("product_created", product_id=product.id, brand=product.brand, stock=product.stock)
    return product
