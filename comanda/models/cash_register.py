"""
Comanda — Cash register models

[CONFIG DATA]        cash_register — one row per sales channel holding its open/closed state
[TRANSACTIONAL DATA] sales_closures — one row per shift closure, tagged with its channel

Channels: "restaurant" (the main register) and one per school lunch
programme (see models.school.SchoolChannel).
"""
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from comanda.core.clock import utcnow
from comanda.db.database import Base

RESTAURANT_CHANNEL = "restaurant"


def _money(**kwargs):
    return mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"), **kwargs)


class CashRegister(Base):
    __tablename__ = "cash_register"

    channel: Mapped[str] = mapped_column(String(16), primary_key=True, default=RESTAURANT_CHANNEL)
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    opened_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    opened_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    initial_cash: Mapped[Decimal] = _money()
    current_cash: Mapped[Decimal] = _money()
    last_closure_id: Mapped[str | None] = mapped_column(String(36), nullable=True)


class SalesClosure(Base):
    __tablename__ = "sales_closures"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    channel: Mapped[str] = mapped_column(String(16), index=True, nullable=False, default=RESTAURANT_CHANNEL)
    closure_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    closure_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    opened_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    closed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    opened_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    opened_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    closed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    closed_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    initial_cash: Mapped[Decimal] = _money()
    final_cash: Mapped[Decimal] = _money()
    cash_difference: Mapped[Decimal] = _money()

    total_cash: Mapped[Decimal] = _money()
    total_mobile_wallet: Mapped[Decimal] = _money()
    total_card: Mapped[Decimal] = _money()
    total_not_applicable: Mapped[Decimal] = _money()

    total_phone: Mapped[Decimal] = _money()
    total_walk_in: Mapped[Decimal] = _money()
    total_delivery: Mapped[Decimal] = _money()

    total_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_amount: Mapped[Decimal] = _money()

    orders_pending: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    orders_preparing: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    orders_ready: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    orders_delivered: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    orders_cancelled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    top_products: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
