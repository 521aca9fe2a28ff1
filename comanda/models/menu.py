"""
Comanda — Menu catalog models

[CONFIG DATA] — categories and menu items.
MenuItem.category holds the category *name*; renaming a category rewrites it.
"""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import Boolean, DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from comanda.core.clock import utcnow
from comanda.db.database import Base

UNCATEGORIZED = "Uncategorized"


class MenuItemType(str, PyEnum):
    FOOD = "food"
    DRINK = "drink"


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class MenuItem(Base):
    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(100), index=True, nullable=False, default=UNCATEGORIZED)
    type: Mapped[MenuItemType] = mapped_column(
        Enum(MenuItemType, name="menu_item_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=MenuItemType.FOOD,
    )
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_daily_special: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<MenuItem {self.name} price={self.price}>"
