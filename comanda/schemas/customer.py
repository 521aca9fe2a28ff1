"""
Comanda — Customer schemas
"""
from pydantic import BaseModel, Field, field_validator

from comanda.schemas.common import Money, UtcDatetime, strip_or_none


class CustomerCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=32)
    address: str | None = Field(None, max_length=500)
    email: str | None = Field(None, max_length=255)

    @field_validator("name", "phone")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    strip_optional = field_validator("address", "email")(strip_or_none)


class CustomerUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, min_length=1, max_length=32)
    address: str | None = Field(None, max_length=500)
    email: str | None = Field(None, max_length=255)

    @field_validator("name", "phone")
    @classmethod
    def not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    strip_optional = field_validator("address", "email")(strip_or_none)


class CustomerResponse(BaseModel):
    id: str
    name: str
    phone: str
    address: str | None = None
    email: str | None = None
    orders_count: int
    total_spent: Money
    last_order: UtcDatetime | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = {"from_attributes": True}
