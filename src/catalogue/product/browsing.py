"""Catalogue browsing queries — plain filtered SELECTs over active products."""

import json
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.orm import Session

from catalogue.product.product import Product
from shared.errors import NotFound, ValidationFailed

SORT_ORDERS = {
    "newest": (Product.created_at.desc(), Product.id),
    "price_asc": (Product.price.asc(), Product.id),
    "price_desc": (Product.price.desc(), Product.id),
    "name": (Product.name.asc(), Product.id),
}


@dataclass
class ProductPage:
    items: list[Product]
    total: int
    limit: int
    offset: int


@dataclass
class Facets:
    brands: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    genders: list[str] = field(default_factory=list)


def _tag_pattern(tag: str) -> str:
    """LIKE pattern matching one whole tag inside the stored JSON array text."""
    encoded = json.dumps(tag.strip().lower())
    for char in ("!", "%", "_"):
        encoded = encoded.replace(char, "!" + char)
    return f"%{encoded}%"


def get_product(session: Session, product_id: str, *, include_inactive: bool = False) -> Product:
    product = session.get(Product, product_id)
    if product is None or (not product.is_active and not include_inactive):
        raise NotFound(f"Product {product_id} not found")
    return product


def list_products(
    session: Session,
    *,
    gender: str | None = None,
    category: str | None = None,
    brand: str | None = None,
    search: str | None = None,
    min_price: Decimal | None = None,
    max_price: Decimal | None = None,
    in_stock: bool | None = None,
    sort: str = "newest",
    limit: int = 24,
    offset: int = 0,
) -> ProductPage:
    """Filter active products.

    Price bounds apply to the list price. ``category`` matches one tag of the
    product's tag set.
    """
    if sort not in SORT_ORDERS:
        raise ValidationFailed(f"Unknown sort order: {sort}")

    conditions = [Product.is_active.is_(True)]
    if gender:
        conditions.append(Product.gender == gender.lower())
    if brand:
        conditions.append(func.lower(Product.brand) == brand.strip().lower())
    if category:
        # Tags are stored as a JSON array of lower-case strings
        conditions.append(cast(Product.categories, String).like(_tag_pattern(category), escape="!"))
    if search:
        pattern = f"%{search.strip()}%"
        conditions.append(
            or_(
                Product.name.ilike(pattern),
                Product.brand.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )
    if min_price is not None:
        conditions.append(Product.price >= min_price)
    if max_price is not None:
        conditions.append(Product.price <= max_price)
    if in_stock is True:
        conditions.append(Product.stock > 0)
    elif in_stock is False:
        conditions.append(Product.stock == 0)

    total = session.scalar(select(func.count()).select_from(Product).where(*conditions)) or 0
    items = session.scalars(
        select(Product).where(*conditions).order_by(*SORT_ORDERS[sort]).limit(limit).offset(offset)
    ).all()
    return ProductPage(items=list(items), total=total, limit=limit, offset=offset)


def catalogue_facets(session: Session) -> Facets:
    """Distinct brands, category tags and genders across active products."""
    active = Product.is_active.is_(True)
    brands = session.scalars(select(Product.brand).where(active).distinct().order_by(Product.brand)).all()
    genders = session.scalars(select(Product.gender).where(active).distinct().order_by(Product.gender)).all()

    categories: set[str] = set()
    for tags in session.scalars(select(Product.categories).where(active)):
        categories.update(tags or [])

    return Facets(brands=list(brands), categories=sorted(categories), genders=list(genders))
