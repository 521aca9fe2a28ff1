"""
Comanda — School lunch order persistence

Each channel numbers its orders per local day with its own prefix:
  fullday      FD-YYYYMMDD-NNNN
  oep          OEP-YYYYMMDD-NNNN
  loncheritas  LON-YYYYMMDD-NNNN
Menu items are resolved and snapshotted exactly as for restaurant orders.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import local_day_bounds, local_today, to_local, utcnow
from comanda.db.order_ops import next_sequence, resolve_menu_items, to_money
from comanda.models.order import OrderStatus
from comanda.models.school import SchoolChannel, SchoolOrder, SchoolOrderItem
from comanda.models.student import Student
from comanda.schemas.school import STUDENT_FIELDS, SchoolOrderRequest

logger = logging.getLogger(__name__)

CHANNEL_PREFIXES = {
    SchoolChannel.FULLDAY: "FD",
    SchoolChannel.OEP: "OEP",
    SchoolChannel.LONCHERITAS: "LON",
}


async def next_order_number(db: AsyncSession, channel: SchoolChannel, now: datetime) -> str:
    prefix = CHANNEL_PREFIXES[channel]
    local_now = to_local(now)
    sequence = await next_sequence(db, prefix, local_now.date())
    return f"{prefix}-{local_now.strftime('%Y%m%d')}-{sequence:04d}"


async def student_details(db: AsyncSession, payload: SchoolOrderRequest) -> dict:
    """
    Student fields for the order snapshot.

    Raises ValueError when student_id does not exist.
    """
    details = {name: getattr(payload, name) for name in STUDENT_FIELDS}
    details["phone"] = payload.phone
    details["student_id"] = None

    if payload.student_id:
        student = await db.get(Student, payload.student_id)
        if student is None:
            raise ValueError(f"Student not found: {payload.student_id}.")
        details["student_id"] = student.id
        registry = {
            "student_name": student.full_name,
            "grade": student.grade,
            "section": student.section,
            "guardian_name": student.guardian_name,
            "phone": student.phone,
        }
        for name, value in registry.items():
            if details[name] is None:
                details[name] = value
    return details


async def create_order(db: AsyncSession, channel: SchoolChannel, payload: SchoolOrderRequest) -> SchoolOrder:
    menu = await resolve_menu_items(db, [line.menu_item_id for line in payload.items])
    details = await student_details(db, payload)

    now = utcnow()
    order_number = await next_order_number(db, channel, now)

    items = []
    total = Decimal("0.00")
    for line_no, line in enumerate(payload.items, start=1):
        menu_item = menu[line.menu_item_id]
        price = to_money(menu_item.price)
        total += price * line.quantity
        items.append(SchoolOrderItem(
            line_no=line_no,
            menu_item_id=menu_item.id,
            menu_item_name=menu_item.name,
            menu_item_price=price,
            quantity=line.quantity,
            notes=line.notes,
        ))

    order = SchoolOrder(
        channel=channel,
        order_number=order_number,
        status=OrderStatus.PENDING,
        total=to_money(total),
        payment_method=payload.payment_method,
        notes=payload.notes,
        created_at=now,
        updated_at=now,
        items=items,
        **details,
    )
    db.add(order)
    await db.commit()

    logger.info("School order %s for %s created, total %s", order_number, order.student_name, order.total)
    return order


async def get_order(db: AsyncSession, channel: SchoolChannel, order_id: str) -> SchoolOrder | None:
    result = await db.execute(
        select(SchoolOrder).where(SchoolOrder.id == order_id, SchoolOrder.channel == channel)
    )
    return result.scalar_one_or_none()


async def list_orders(
    db: AsyncSession,
    channel: SchoolChannel,
    days: int,
    limit: int,
    offset: int,
    status: OrderStatus | None = None,
) -> tuple[int, list[SchoolOrder]]:
    since = utcnow() - timedelta(days=days)
    filters = [SchoolOrder.channel == channel, SchoolOrder.created_at >= since]
    if status is not None:
        filters.append(SchoolOrder.status == status)

    total = (await db.execute(select(func.count(SchoolOrder.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(SchoolOrder)
        .where(*filters)
        .order_by(SchoolOrder.created_at.desc(), SchoolOrder.order_number.desc())
        .limit(limit)
        .offset(offset)
    )
    return total, list(result.scalars().all())


async def orders_between(
    db: AsyncSession, channel: SchoolChannel, start: datetime, end: datetime
) -> list[SchoolOrder]:
    result = await db.execute(
        select(SchoolOrder)
        .where(
            SchoolOrder.channel == channel,
            SchoolOrder.created_at >= start,
            SchoolOrder.created_at < end,
        )
        .order_by(SchoolOrder.created_at.desc())
    )
    return list(result.scalars().all())


async def today_orders(db: AsyncSession, channel: SchoolChannel) -> list[SchoolOrder]:
    start, end = local_day_bounds(local_today())
    return await orders_between(db, channel, start, end)


async def set_status(db: AsyncSession, order: SchoolOrder, status: OrderStatus) -> SchoolOrder:
    previous = order.status
    order.status = status
    order.updated_at = utcnow()
    await db.commit()
    logger.info("School order %s: %s -> %s", order.order_number, previous.value, status.value)
    return order
