"""
Comanda — Student schemas
"""
from pydantic import BaseModel, Field, field_validator

from comanda.models.student import Grade, Section
from comanda.schemas.common import UtcDatetime, strip_or_none


def required_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class StudentCreateRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    grade: Grade
    section: Section
    guardian_name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=32)

    strip_names = field_validator("full_name", "guardian_name")(required_text)
    strip_phone = field_validator("phone")(strip_or_none)


class StudentUpdateRequest(BaseModel):
    full_name: str | None = Field(None, min_length=1, max_length=255)
    grade: Grade | None = None
    section: Section | None = None
    guardian_name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=32)

    strip_names = field_validator("full_name", "guardian_name")(required_text)
    strip_phone = field_validator("phone")(strip_or_none)


class StudentResponse(BaseModel):
    id: str
    full_name: str
    grade: Grade
    section: Section
    guardian_name: str
    phone: str | None = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = {"from_attributes": True}
