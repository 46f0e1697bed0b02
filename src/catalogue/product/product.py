"""Product model — the sellable item and its stock counter.

Stock is only ever changed with single conditional UPDATE statements
(see ``catalogue.product.stock.restock_product`` and the checkout flow),
never by writing back a value read earlier.
"""

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import uuid4

from sqlalchemy import JSON, Boolean, CheckConstraint, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from shared.db import Base, utcnow

CENTS = Decimal("0.01")
MAX_DISCOUNT_PERCENT = 95


class Gender(Enum):
    WOMEN = "women"
    MEN = "men"
    UNISEX = "unisex"


def single_line(text: str | None) -> str | None:
    """Strip newlines and collapse runs of whitespace."""
    if text is None:
        return None
    return re.sub(r"\s+", " ", text).strip()


def discounted_price(price: Decimal, discount_percent: int) -> Decimal:
    price = Decimal(price)
    return (price * (100 - discount_percent) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)


def _new_product_id() -> str:
    return uuid4().hex


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint(
            f"discount_percent >= 0 AND discount_percent <= {MAX_DISCOUNT_PERCENT}",
            name="ck_products_discount_range",
        ),
        Index("ix_products_active_gender", "is_active", "gender"),
        Index("ix_products_active_brand", "is_active", "brand"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_product_id)
    name: Mapped[str] = mapped_column(String(200))
    brand: Mapped[str] = mapped_column(String(100))
    gender: Mapped[str] = mapped_column(String(16), default=Gender.UNISEX.value)
    categories: Mapped[list[str]] = mapped_column(JSON, default=list)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    discount_percent: Mapped[int] = mapped_column(Integer, default=0)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    @validates("description")
    def _strip_description(self, _key, value):
        return single_line(value)

    @validates("categories")
    def _normalise_categories(self, _key, value):
        # A set of tags: lower-cased, de-duplicated, order preserved
        seen = []
        for tag in value or []:
            tag = tag.strip().lower()
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    @validates("gender")
    def _check_gender(self, _key, value):
        return Gender(value).value

    @property
    def unit_price(self) -> Decimal:
        """Price the customer pays for one unit, discount applied."""
        return discounted_price(self.price, self.discount_percent or 0)

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def __repr__(self) -> str:
        return f"<Product {self.id} {self.name!r} stock={self.stock}>"
