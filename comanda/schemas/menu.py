"""
Comanda — Menu schemas
"""
from pydantic import BaseModel, Field, field_validator

from comanda.models.menu import MenuItemType
from comanda.schemas.common import Money, UtcDatetime, strip_or_none


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class MenuItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    type: MenuItemType = MenuItemType.FOOD
    available: bool = True
    is_daily_special: bool = False
    sort_order: int = 0

    check_text = field_validator("name", "category")(_required_text)
    strip_description = field_validator("description")(strip_or_none)


class MenuItemUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    price: float | None = Field(None, ge=0)
    category: str | None = Field(None, min_length=1, max_length=100)
    type: MenuItemType | None = None
    available: bool | None = None
    is_daily_special: bool | None = None
    sort_order: int | None = None

    @field_validator("name", "category")
    @classmethod
    def check_text(cls, value: str | None) -> str | None:
        return None if value is None else _required_text(value)

    strip_description = field_validator("description")(strip_or_none)


class DailySpecialRequest(BaseModel):
    is_daily_special: bool


class MenuItemResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: Money
    category: str
    type: MenuItemType
    available: bool
    is_daily_special: bool
    sort_order: int
    created_at: UtcDatetime
    updated_at: UtcDatetime

    model_config = {"from_attributes": True}


class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    check_name = field_validator("name")(_required_text)


class CategoryResponse(BaseModel):
    id: str
    name: str
    sort_order: int

    model_config = {"from_attributes": True}


class MenuGroupResponse(BaseModel):
    category: str
    items: list[MenuItemResponse]
