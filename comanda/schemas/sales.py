"""
Comanda — Cash register and sales report schemas
"""
import datetime

from pydantic import BaseModel, Field, field_validator

from comanda.schemas.common import Money, UtcDatetime, strip_or_none


class RegisterOpenRequest(BaseModel):
    initial_cash: float = Field(..., ge=0)


class RegisterCloseRequest(BaseModel):
    final_cash: float = Field(..., ge=0)
    notes: str | None = Field(None, max_length=1000)

    strip_notes = field_validator("notes")(strip_or_none)


class CashRegisterResponse(BaseModel):
    channel: str
    is_open: bool
    opened_at: UtcDatetime | None = None
    opened_by: str | None = None
    opened_by_name: str | None = None
    initial_cash: Money
    current_cash: Money
    last_closure_id: str | None = None

    model_config = {"from_attributes": True}


class TopProduct(BaseModel):
    name: str
    quantity: int
    total: Money


class PaymentTotals(BaseModel):
    cash: Money = 0.0
    mobile_wallet: Money = 0.0
    card: Money = 0.0
    not_applicable: Money = 0.0


class SourceTotals(BaseModel):
    phone: Money = 0.0
    walk_in: Money = 0.0
    delivery: Money = 0.0


class StatusCounts(BaseModel):
    pending: int = 0
    preparing: int = 0
    ready: int = 0
    delivered: int = 0
    cancelled: int = 0


class DailySummaryResponse(BaseModel):
    date: datetime.date
    total_orders: int
    total_amount: Money
    by_payment: PaymentTotals
    by_source: SourceTotals
    by_status: StatusCounts
    top_products: list[TopProduct]


class SalesClosureResponse(BaseModel):
    id: str
    channel: str
    closure_date: datetime.date
    closure_number: str
    opened_at: UtcDatetime | None = None
    closed_at: UtcDatetime
    opened_by: str | None = None
    opened_by_name: str | None = None
    closed_by: str | None = None
    closed_by_name: str | None = None
    initial_cash: Money
    final_cash: Money
    cash_difference: Money
    total_cash: Money
    total_mobile_wallet: Money
    total_card: Money
    total_not_applicable: Money
    total_phone: Money
    total_walk_in: Money
    total_delivery: Money
    total_orders: int
    total_amount: Money
    orders_pending: int
    orders_preparing: int
    orders_ready: int
    orders_delivered: int
    orders_cancelled: int
    notes: str | None = None
    top_products: list[TopProduct]

    model_config = {"from_attributes": True}


class DailyBreakdown(BaseModel):
    date: datetime.date
    total_orders: int
    total_amount: Money


class SalesSummaryResponse(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    total_orders: int
    total_amount: Money
    by_payment: PaymentTotals
    top_products: list[TopProduct]
    daily: list[DailyBreakdown]
