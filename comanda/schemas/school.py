"""
Comanda — School lunch order schemas

An order names a registered student (student_id) or carries the student's
details inline; inline fields override the registry copy.
"""
from pydantic import BaseModel, Field, field_validator, model_validator

from comanda.models.order import OrderStatus, PaymentMethod
from comanda.models.school import SchoolChannel
from comanda.models.student import Grade, Section
from comanda.schemas.common import Money, UtcDatetime, strip_or_none
from comanda.schemas.order import OrderItemRequest
from comanda.schemas.student import required_text

STUDENT_FIELDS = ("student_name", "grade", "section", "guardian_name")


class SchoolOrderRequest(BaseModel):
    student_id: str | None = Field(None, max_length=36)
    student_name: str | None = Field(None, max_length=255)
    grade: Grade | None = None
    section: Section | None = None
    guardian_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=32)
    notes: str | None = Field(None, max_length=500)
    payment_method: PaymentMethod | None = None
    items: list[OrderItemRequest] = Field(..., min_length=1, max_length=50)

    strip_names = field_validator("student_name", "guardian_name")(required_text)
    strip_optional = field_validator("student_id", "phone", "notes")(strip_or_none)

    @model_validator(mode="after")
    def student_is_identified(self):
        if self.student_id:
            return self
        missing = [name for name in STUDENT_FIELDS if getattr(self, name) is None]
        if missing:
            raise ValueError(f"without student_id these fields are required: {', '.join(missing)}")
        return self


class SchoolOrderItemResponse(BaseModel):
    id: str
    menu_item_id: str
    menu_item_name: str
    menu_item_price: Money
    quantity: int
    notes: str | None = None
    subtotal: Money

    model_config = {"from_attributes": True}


class SchoolOrderResponse(BaseModel):
    id: str
    channel: SchoolChannel
    order_number: str
    student_id: str | None = None
    student_name: str
    grade: Grade
    section: Section
    guardian_name: str
    phone: str | None = None
    status: OrderStatus
    total: Money
    payment_method: PaymentMethod | None = None
    notes: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime
    items: list[SchoolOrderItemResponse]

    model_config = {"from_attributes": True}


class SchoolOrderListResponse(BaseModel):
    total: int
    orders: list[SchoolOrderResponse]
