"""
Comanda — Order persistence

Orders are numbered per local calendar day:
  order_number   ORD-YYYYMMDD-NNNN
  kitchen_number COM-NNN
NNN comes from a per-day counter row (order_sequences), so numbers are
never reused after a delete. The counter is bumped inside the order's
transaction; concurrent creations are not serialized (last write wins).
"""
import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import local_day_bounds, local_today, to_local, utcnow
from comanda.core.config import get_settings
from comanda.models.menu import MenuItem
from comanda.models.order import Order, OrderItem, OrderSequence, OrderSource, OrderStatus
from comanda.schemas.order import OrderRequest

settings = get_settings()
logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ORDER_PREFIX = "ORD"


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


async def next_sequence(db: AsyncSession, prefix: str, day: date) -> int:
    """Bump and return the day's counter for `prefix`. Committed by the caller."""
    counter = await db.get(OrderSequence, (prefix, day))
    if counter is None:
        counter = OrderSequence(prefix=prefix, day=day, last_value=0)
        db.add(counter)
    counter.last_value += 1
    return counter.last_value


async def next_order_numbers(db: AsyncSession, now: datetime) -> tuple[str, str]:
    local_now = to_local(now)
    sequence = await next_sequence(db, ORDER_PREFIX, local_now.date())
    stamp = local_now.strftime("%Y%m%d")
    return f"{ORDER_PREFIX}-{stamp}-{sequence:04d}", f"COM-{sequence:03d}"


async def resolve_menu_items(db: AsyncSession, menu_item_ids: list[str]) -> dict[str, MenuItem]:
    """
    Load the referenced menu items.

    Raises ValueError when an id is unknown or the item is not available;
    the caller turns it into a 400.
    """
    wanted = set(menu_item_ids)
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(wanted)))
    found = {item.id: item for item in result.scalars().all()}

    missing = sorted(wanted - found.keys())
    if missing:
        raise ValueError(f"Menu item(s) not found: {', '.join(missing)}.")

    unavailable = sorted(item.name for item in found.values() if not item.available)
    if unavailable:
        raise ValueError(f"Menu item(s) not available: {', '.join(unavailable)}.")

    return found


async def create_order(db: AsyncSession, payload: OrderRequest) -> Order:
    """Persist a new pending order with name/price snapshots of each item."""
    menu = await resolve_menu_items(db, [line.menu_item_id for line in payload.items])

    now = utcnow()
    order_number, kitchen_number = await next_order_numbers(db, now)

    items = []
    total = Decimal("0.00")
    for line_no, line in enumerate(payload.items, start=1):
        menu_item = menu[line.menu_item_id]
        price = to_money(menu_item.price)
        total += price * line.quantity
        items.append(OrderItem(
            line_no=line_no,
            menu_item_id=menu_item.id,
            menu_item_name=menu_item.name,
            menu_item_price=price,
            quantity=line.quantity,
            notes=line.notes,
            created_at=now,
        ))

    order = Order(
        order_number=order_number,
        kitchen_number=kitchen_number,
        customer_name=payload.customer_name,
        phone=payload.phone,
        address=payload.address,
        table_number=payload.table_number,
        source_type=payload.source,
        status=OrderStatus.PENDING,
        total=to_money(total),
        notes=payload.notes,
        payment_method=payload.payment_method,
        created_at=now,
        updated_at=now,
        items=items,
    )
    db.add(order)
    await db.commit()

    logger.info("Order %s (%s) created: %d item(s), total %s", order_number, kitchen_number, len(items), order.total)
    return order


async def get_order(db: AsyncSession, order_id: str) -> Order | None:
    result = await db.execute(select(Order).where(Order.id == order_id))
    return result.scalar_one_or_none()


async def list_orders(
    db: AsyncSession,
    days: int,
    limit: int,
    offset: int,
    status: OrderStatus | None = None,
    source: OrderSource | None = None,
) -> tuple[int, list[Order]]:
    """Newest-first page of the orders created within the last `days` days."""
    since = utcnow() - timedelta(days=days)
    filters = [Order.created_at >= since]
    if status is not None:
        filters.append(Order.status == status)
    if source is not None:
        filters.append(Order.source_type == source)

    total = (await db.execute(select(func.count(Order.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(Order)
        .where(*filters)
        .order_by(Order.created_at.desc(), Order.order_number.desc())
        .limit(limit)
        .offset(offset)
    )
    return total, list(result.scalars().all())


async def orders_between(db: AsyncSession, start: datetime, end: datetime) -> list[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.created_at >= start, Order.created_at < end)
        .order_by(Order.created_at.desc())
    )
    return list(result.scalars().all())


async def today_orders(db: AsyncSession) -> list[Order]:
    start, end = local_day_bounds(local_today())
    return await orders_between(db, start, end)


async def orders_with_status(db: AsyncSession, statuses: list[OrderStatus]) -> list[Order]:
    """Orders in `statuses` created within the order history window, oldest first."""
    since = utcnow() - timedelta(days=settings.ORDER_HISTORY_DAYS)
    result = await db.execute(
        select(Order)
        .where(Order.status.in_(statuses), Order.created_at >= since)
        .order_by(Order.created_at.asc())
    )
    return list(result.scalars().all())


async def set_status(db: AsyncSession, order: Order, status: OrderStatus) -> Order:
    previous = order.status
    order.status = status
    order.updated_at = utcnow()
    await db.commit()
    logger.info("Order %s: %s -> %s", order.order_number, previous.value, status.value)
    return order
