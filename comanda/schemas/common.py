"""
Comanda — Shared schema types
"""
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, BeforeValidator

from comanda.core.clock import as_utc

# Numeric(…) columns come back as Decimal; the API speaks plain JSON numbers.
Money = Annotated[float, BeforeValidator(lambda v: float(v) if v is not None else v)]
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


def strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    dependencies: dict[str, str]
