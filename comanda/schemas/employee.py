"""
Comanda — Employee schemas
"""
from pydantic import BaseModel, Field, field_validator

from comanda.models.employee import EmployeeRole
from comanda.schemas.common import UtcDatetime, strip_or_none


class EmployeeCreateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    role: EmployeeRole = EmployeeRole.EMPLOYEE
    display_role: str = Field("CASHIER 01", min_length=1, max_length=64)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, value: str) -> str:
        value = value.strip().lower()
        if len(value) < 3:
            raise ValueError("username must have at least 3 characters")
        return value

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    strip_email = field_validator("email")(strip_or_none)


class EmployeeUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    role: EmployeeRole | None = None
    display_role: str | None = Field(None, min_length=1, max_length=64)
    is_active: bool | None = None

    strip_email = field_validator("email")(strip_or_none)


class EmployeeResponse(BaseModel):
    id: str
    username: str
    name: str
    email: str | None = None
    role: EmployeeRole
    display_role: str
    is_active: bool
    created_at: UtcDatetime

    model_config = {"from_attributes": True}
