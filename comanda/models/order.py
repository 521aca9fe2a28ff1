"""
Comanda — Order models

[TRANSACTIONAL DATA] — orders and their line items.
Item name and price are snapshotted at order time.
"""
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from comanda.core.clock import utcnow
from comanda.db.database import Base


class OrderStatus(str, PyEnum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderSource(str, PyEnum):
    PHONE = "phone"
    WALK_IN = "walk-in"
    DELIVERY = "delivery"


class PaymentMethod(str, PyEnum):
    CASH = "cash"
    MOBILE_WALLET = "mobile_wallet"
    CARD = "card"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_number: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    kitchen_number: Mapped[str] = mapped_column(String(32), nullable=False)
    customer_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), index=True, nullable=False, default="")
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    table_number: Mapped[str | None] = mapped_column(String(16), nullable=True)
    source_type: Mapped[OrderSource] = mapped_column(
        Enum(OrderSource, name="order_source", values_callable=_enum_values), nullable=False
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status", values_callable=_enum_values),
        default=OrderStatus.PENDING,
        index=True,
        nullable=False,
    )
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        Enum(PaymentMethod, name="payment_method", values_callable=_enum_values), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.line_no",
    )

    def __repr__(self) -> str:
        return f"<Order {self.order_number} status={self.status.value}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    menu_item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    menu_item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    menu_item_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    order: Mapped[Order] = relationship(back_populates="items")

    @property
    def subtotal(self) -> Decimal:
        return Decimal(self.menu_item_price) * self.quantity


class OrderSequence(Base):
    """
    [CONFIG DATA] Last number issued per prefix and local day.

    Deleting an order never frees its number.
    """
    __tablename__ = "order_sequences"

    prefix: Mapped[str] = mapped_column(String(16), primary_key=True)
    day: Mapped[date] = mapped_column(Date, primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
