"""
Comanda — Order schemas
"""
from pydantic import BaseModel, Field, field_validator, model_validator

from comanda.models.order import OrderSource, OrderStatus, PaymentMethod
from comanda.schemas.common import Money, UtcDatetime, strip_or_none


class OrderItemRequest(BaseModel):
    menu_item_id: str = Field(..., min_length=1, max_length=36)
    quantity: int = Field(..., ge=1, le=99)
    notes: str | None = Field(None, max_length=255)

    strip_notes = field_validator("notes")(strip_or_none)


class OrderRequest(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field("", max_length=32)
    address: str | None = Field(None, max_length=500)
    table_number: str | None = Field(None, max_length=16)
    source: OrderSource
    notes: str | None = Field(None, max_length=500)
    payment_method: PaymentMethod | None = None
    items: list[OrderItemRequest] = Field(..., min_length=1, max_length=50)

    @field_validator("customer_name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("customer_name must not be blank")
        return value

    @field_validator("phone")
    @classmethod
    def strip_phone(cls, value: str) -> str:
        return value.strip()

    strip_optional = field_validator("address", "table_number", "notes")(strip_or_none)

    @model_validator(mode="after")
    def delivery_needs_address(self):
        if self.source == OrderSource.DELIVERY and not self.address:
            raise ValueError("delivery orders require an address")
        return self


class OrderItemResponse(BaseModel):
    id: str
    menu_item_id: str
    menu_item_name: str
    menu_item_price: Money
    quantity: int
    notes: str | None = None
    subtotal: Money

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: str
    order_number: str
    kitchen_number: str
    customer_id: str | None = None
    customer_name: str
    phone: str
    address: str | None = None
    table_number: str | None = None
    source_type: OrderSource
    status: OrderStatus
    total: Money
    notes: str | None = None
    payment_method: PaymentMethod | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime
    items: list[OrderItemResponse]

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    total: int
    orders: list[OrderResponse]


class StatusUpdateRequest(BaseModel):
    status: OrderStatus


class PaymentUpdateRequest(BaseModel):
    payment_method: PaymentMethod | None = None


class KitchenBoardResponse(BaseModel):
    pending: list[OrderResponse]
    preparing: list[OrderResponse]
    ready: list[OrderResponse]
