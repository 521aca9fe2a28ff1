"""
Comanda — School lunch orders

[TRANSACTIONAL DATA] — orders placed for students through one of the
school lunch programmes. Each programme (channel) keeps its own numbering,
cash register and closures; the three share these tables.
Student details and item name/price are snapshotted at order time.
"""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from comanda.core.clock import utcnow
from comanda.db.database import Base
from comanda.models.order import OrderStatus, PaymentMethod
from comanda.models.student import Grade, Section


class SchoolChannel(str, PyEnum):
    FULLDAY = "fullday"
    OEP = "oep"
    LONCHERITAS = "loncheritas"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class SchoolOrder(Base):
    __tablename__ = "school_orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    channel: Mapped[SchoolChannel] = mapped_column(
        Enum(SchoolChannel, name="school_channel", values_callable=_enum_values), index=True, nullable=False
    )
    order_number: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    student_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    grade: Mapped[Grade] = mapped_column(
        Enum(Grade, name="student_grade", values_callable=_enum_values), nullable=False
    )
    section: Mapped[Section] = mapped_column(
        Enum(Section, name="student_section", values_callable=_enum_values), nullable=False
    )
    guardian_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status", values_callable=_enum_values),
        default=OrderStatus.PENDING,
        index=True,
        nullable=False,
    )
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        Enum(PaymentMethod, name="payment_method", values_callable=_enum_values), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items: Mapped[list["SchoolOrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="SchoolOrderItem.line_no",
    )

    def __repr__(self) -> str:
        return f"<SchoolOrder {self.order_number} channel={self.channel.value} status={self.status.value}>"


class SchoolOrderItem(Base):
    __tablename__ = "school_order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("school_orders.id", ondelete="CASCADE"), index=True, nullable=False
    )
    line_no: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    menu_item_id: Mapped[str] = mapped_column(String(36), nullable=False)
    menu_item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    menu_item_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    order: Mapped[SchoolOrder] = relationship(back_populates="items")

    @property
    def subtotal(self) -> Decimal:
        return Decimal(self.menu_item_price) * self.quantity
