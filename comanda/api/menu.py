"""
Comanda — Menu catalog API

Items reference their category by name. Renaming a category rewrites the
name on its items; deleting one moves its items to "Uncategorized".
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import utcnow
from comanda.core.security import require_roles
from comanda.db.database import get_db
from comanda.db.order_ops import to_money
from comanda.models.menu import UNCATEGORIZED, Category, MenuItem
from comanda.schemas.menu import (
    CategoryRequest,
    CategoryResponse,
    DailySpecialRequest,
    MenuGroupResponse,
    MenuItemCreateRequest,
    MenuItemResponse,
    MenuItemUpdateRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/menu", tags=["menu"])

can_edit_menu = Depends(require_roles("admin", "manager"))


async def _group_by_category(db: AsyncSession, items: list[MenuItem]) -> list[dict]:
    result = await db.execute(select(Category.name).order_by(Category.sort_order, Category.name))
    category_order = {name: position for position, name in enumerate(result.scalars().all())}

    groups: dict[str, list[MenuItem]] = {}
    for item in items:
        groups.setdefault(item.category, []).append(item)

    # Known categories first in their configured order; unknown ones (e.g.
    # Uncategorized) after them, alphabetically.
    ordered = sorted(groups, key=lambda name: (name not in category_order, category_order.get(name, 0), name))
    return [{"category": name, "items": groups[name]} for name in ordered]


async def _items(db: AsyncSession, *filters) -> list[MenuItem]:
    result = await db.execute(
        select(MenuItem).where(*filters).order_by(MenuItem.sort_order, MenuItem.name)
    )
    return list(result.scalars().all())


async def _load_item(db: AsyncSession, item_id: str) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found.")
    return item


@router.get("", response_model=list[MenuGroupResponse])
async def menu(db: AsyncSession = Depends(get_db)):
    """Full menu grouped by category, items ordered by sort_order then name."""
    return await _group_by_category(db, await _items(db))


@router.get("/daily-specials", response_model=list[MenuGroupResponse])
async def daily_specials(db: AsyncSession = Depends(get_db)):
    return await _group_by_category(db, await _items(db, MenuItem.is_daily_special.is_(True)))


# ── Items ─────────────────────────────────────────────────────────────────────
@router.get("/items", response_model=list[MenuItemResponse])
async def list_items(
    category: str | None = Query(None),
    available: bool | None = Query(None),
    daily_special: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    filters = []
    if category is not None:
        filters.append(MenuItem.category == category)
    if available is not None:
        filters.append(MenuItem.available.is_(available))
    if daily_special is not None:
        filters.append(MenuItem.is_daily_special.is_(daily_special))
    return await _items(db, *filters)


@router.get("/items/{item_id}", response_model=MenuItemResponse)
async def get_item(item_id: str, db: AsyncSession = Depends(get_db)):
    return await _load_item(db, item_id)


@router.post(
    "/items",
    response_model=MenuItemResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[can_edit_menu],
)
async def create_item(payload: MenuItemCreateRequest, db: AsyncSession = Depends(get_db)):
    now = utcnow()
    data = payload.model_dump()
    data["price"] = to_money(data["price"])
    item = MenuItem(**data, created_at=now, updated_at=now)
    db.add(item)
    await db.commit()
    logger.info("Menu item '%s' created in %s", item.name, item.category)
    return item


@router.patch("/items/{item_id}", response_model=MenuItemResponse, dependencies=[can_edit_menu])
async def update_item(item_id: str, payload: MenuItemUpdateRequest, db: AsyncSession = Depends(get_db)):
    """Partial update: only the fields present in the body change."""
    item = await _load_item(db, item_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        # Only description may be cleared; null elsewhere means "unchanged".
        if value is None and field != "description":
            continue
        if field == "price":
            value = to_money(value)
        setattr(item, field, value)
    item.updated_at = utcnow()
    await db.commit()
    return item


@router.patch(
    "/items/{item_id}/daily-special",
    response_model=MenuItemResponse,
    dependencies=[can_edit_menu],
)
async def toggle_daily_special(
    item_id: str, payload: DailySpecialRequest, db: AsyncSession = Depends(get_db)
):
    item = await _load_item(db, item_id)
    item.is_daily_special = payload.is_daily_special
    item.updated_at = utcnow()
    await db.commit()
    return item


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_edit_menu])
async def delete_item(item_id: str, db: AsyncSession = Depends(get_db)):
    item = await _load_item(db, item_id)
    await db.delete(item)
    await db.commit()
    logger.info("Menu item '%s' deleted", item.name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Categories ────────────────────────────────────────────────────────────────
async def _category_by_name(db: AsyncSession, name: str) -> Category | None:
    result = await db.execute(select(Category).where(Category.name == name))
    return result.scalar_one_or_none()


async def _load_category(db: AsyncSession, category_id: str) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found.")
    return category


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Category).order_by(Category.sort_order, Category.name))
    return result.scalars().all()


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[can_edit_menu],
)
async def create_category(payload: CategoryRequest, db: AsyncSession = Depends(get_db)):
    if await _category_by_name(db, payload.name):
        raise HTTPException(status_code=409, detail=f"Category '{payload.name}' already exists.")

    highest = (await db.execute(select(func.max(Category.sort_order)))).scalar_one_or_none()
    category = Category(name=payload.name, sort_order=(highest or 0) + 1, created_at=utcnow())
    db.add(category)
    await db.commit()
    return category


@router.patch("/categories/{category_id}", response_model=CategoryResponse, dependencies=[can_edit_menu])
async def rename_category(category_id: str, payload: CategoryRequest, db: AsyncSession = Depends(get_db)):
    """Rename a category and every menu item filed under it."""
    category = await _load_category(db, category_id)
    if payload.name == category.name:
        return category

    clash = await _category_by_name(db, payload.name)
    if clash:
        raise HTTPException(status_code=409, detail=f"Category '{payload.name}' already exists.")

    old_name = category.name
    category.name = payload.name
    result = await db.execute(
        update(MenuItem)
        .where(MenuItem.category == old_name)
        .values(category=payload.name, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()
    logger.info("Category '%s' renamed to '%s' (%d item(s))", old_name, payload.name, result.rowcount)
    return category


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[can_edit_menu])
async def delete_category(category_id: str, db: AsyncSession = Depends(get_db)):
    category = await _load_category(db, category_id)
    result = await db.execute(
        update(MenuItem)
        .where(MenuItem.category == category.name)
        .values(category=UNCATEGORIZED, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    await db.delete(category)
    await db.commit()
    logger.info("Category '%s' deleted, %d item(s) moved to %s", category.name, result.rowcount, UNCATEGORIZED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
