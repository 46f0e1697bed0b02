"""Shopping cart rows and the priced cart view.

A cart is simply the set of ``CartItem`` rows owned by a user; adding to the
cart never reserves stock. Prices are always read live from the catalogue.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from catalogue.product.product import Product
from shared.db import Base, utcnow


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    product_id: Mapped[str] = mapped_column(String(64), ForeignKey("products.id"))
    quantity: Mapped[int] = mapped_column(Integer)
    added_at: Mapped[datetime] = mapped_column(default=utcnow)

    product: Mapped[Product] = relationship(lazy="joined")


@dataclass
class CartLine:
    product_id: str
    name: str
    brand: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    available: bool
    stock: int


@dataclass
class CartView:
    lines: list[CartLine] = field(default_factory=list)
    currency: str = "USD"

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def checkout_ready(self) -> bool:
        return bool(self.lines) and all(line.available for line in self.lines)


def cart_items(session: Session, user_id: str) -> list[CartItem]:
    return list(
        session.scalars(select(CartItem).where(CartItem.user_id == user_id).order_by(CartItem.added_at, CartItem.id))
    )


def list_cart(session: Session, user_id: str, *, currency: str = "USD") -> CartView:
    """Price the user's cart against the live catalogue.

    A line is unavailable when its product was archived or has less stock than
    the requested quantity.
    """
    view = CartView(currency=currency)
    for item in cart_items(session, user_id):
        product = item.product
        unit_price = product.unit_price
        view.lines.append(
            CartLine(
                product_id=product.id,
                name=product.name,
                brand=product.brand,
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=unit_price * item.quantity,
                available=product.is_active and product.stock >= item.quantity,
                stock=product.stock,
            )
        )
    return view
