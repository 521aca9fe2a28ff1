"""
Comanda — Cash register and sales aggregation

summarize_orders is pure and shared by the daily summary, the shift closure
and the date-range report. All orders in the window count, whatever their
status; the status breakdown lets the cashier tell them apart.

Every register operation takes a sales channel: "restaurant" for the main
register or a school lunch channel value. Each channel has its own
register row, closures and closure numbering.
"""
import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import local_day_bounds, local_range_bounds, local_today, to_local, utcnow
from comanda.db import school_ops
from comanda.db.order_ops import orders_between, to_money
from comanda.models.cash_register import RESTAURANT_CHANNEL, CashRegister, SalesClosure
from comanda.models.order import OrderSource, OrderStatus, PaymentMethod
from comanda.models.school import SchoolChannel

logger = logging.getLogger(__name__)

NOT_APPLICABLE = "not_applicable"
DAILY_TOP_PRODUCTS = 10
REPORT_TOP_PRODUCTS = 5
RESTAURANT_CLOSURE_PREFIX = "CLS"


class RegisterStateError(Exception):
    """The register is not in the state the operation needs."""


def summarize_orders(orders: list, top: int = DAILY_TOP_PRODUCTS) -> dict:
    """Totals for restaurant or school orders; school orders carry no source."""
    by_payment = {method.value: Decimal("0.00") for method in PaymentMethod}
    by_payment[NOT_APPLICABLE] = Decimal("0.00")
    by_source = {source.value.replace("-", "_"): Decimal("0.00") for source in OrderSource}
    by_status = {status.value: 0 for status in OrderStatus}
    products: dict[str, dict] = {}
    total_amount = Decimal("0.00")

    for order in orders:
        amount = Decimal(order.total)
        total_amount += amount
        payment_key = order.payment_method.value if order.payment_method else NOT_APPLICABLE
        by_payment[payment_key] += amount
        source = getattr(order, "source_type", None)
        if source is not None:
            by_source[source.value.replace("-", "_")] += amount
        by_status[order.status.value] += 1

        for item in order.items:
            entry = products.setdefault(
                item.menu_item_name,
                {"name": item.menu_item_name, "quantity": 0, "total": Decimal("0.00")},
            )
            entry["quantity"] += item.quantity
            entry["total"] += item.subtotal

    ranked = sorted(products.values(), key=lambda p: (-p["quantity"], p["name"]))[:top]
    return {
        "total_orders": len(orders),
        "total_amount": to_money(total_amount),
        "by_payment": {k: to_money(v) for k, v in by_payment.items()},
        "by_source": {k: to_money(v) for k, v in by_source.items()},
        "by_status": by_status,
        "top_products": [
            {"name": p["name"], "quantity": p["quantity"], "total": to_money(p["total"])}
            for p in ranked
        ],
    }


async def channel_orders(db: AsyncSession, channel: str, start: datetime, end: datetime) -> list:
    if channel == RESTAURANT_CHANNEL:
        return await orders_between(db, start, end)
    return await school_ops.orders_between(db, SchoolChannel(channel), start, end)


async def daily_summary(db: AsyncSession, day: date | None = None, channel: str = RESTAURANT_CHANNEL) -> dict:
    day = day or local_today()
    start, end = local_day_bounds(day)
    summary = summarize_orders(await channel_orders(db, channel, start, end))
    summary["date"] = day
    return summary


async def sales_summary(
    db: AsyncSession, start_date: date, end_date: date, channel: str = RESTAURANT_CHANNEL
) -> dict:
    """Range report: totals, payment split, top products, one row per local day."""
    start, end = local_range_bounds(start_date, end_date)
    orders = await channel_orders(db, channel, start, end)
    summary = summarize_orders(orders, top=REPORT_TOP_PRODUCTS)

    days = defaultdict(lambda: {"total_orders": 0, "total_amount": Decimal("0.00")})
    for order in orders:
        bucket = days[to_local(order.created_at).date()]
        bucket["total_orders"] += 1
        bucket["total_amount"] += Decimal(order.total)

    daily = []
    day = start_date
    while day <= end_date:
        bucket = days[day]
        daily.append({
            "date": day,
            "total_orders": bucket["total_orders"],
            "total_amount": to_money(bucket["total_amount"]),
        })
        day += timedelta(days=1)

    return {
        "start_date": start_date,
        "end_date": end_date,
        "total_orders": summary["total_orders"],
        "total_amount": summary["total_amount"],
        "by_payment": summary["by_payment"],
        "top_products": summary["top_products"],
        "daily": daily,
    }


# ── Register ──────────────────────────────────────────────────────────────────
async def get_register(db: AsyncSession, channel: str = RESTAURANT_CHANNEL) -> CashRegister:
    """Return the channel's register row, creating it closed on first access."""
    register = await db.get(CashRegister, channel)
    if register is None:
        register = CashRegister(
            channel=channel,
            is_open=False,
            initial_cash=Decimal("0.00"),
            current_cash=Decimal("0.00"),
        )
        db.add(register)
        await db.commit()
    return register


async def open_register(
    db: AsyncSession, initial_cash: float, user: dict, channel: str = RESTAURANT_CHANNEL
) -> CashRegister:
    register = await get_register(db, channel)
    if register.is_open:
        raise RegisterStateError("Cash register is already open.")

    register.is_open = True
    register.opened_at = utcnow()
    register.opened_by = user.get("sub")
    register.opened_by_name = user.get("name") or user.get("sub")
    register.initial_cash = to_money(initial_cash)
    register.current_cash = to_money(initial_cash)
    await db.commit()

    logger.info("Cash register %s opened by %s with %s", channel, register.opened_by, register.initial_cash)
    return register


def closure_prefix(channel: str) -> str:
    if channel == RESTAURANT_CHANNEL:
        return RESTAURANT_CLOSURE_PREFIX
    return f"{RESTAURANT_CLOSURE_PREFIX}-{school_ops.CHANNEL_PREFIXES[SchoolChannel(channel)]}"


async def next_closure_number(db: AsyncSession, day: date, channel: str = RESTAURANT_CHANNEL) -> str:
    count = (await db.execute(
        select(func.count(SalesClosure.id)).where(
            SalesClosure.closure_date == day, SalesClosure.channel == channel
        )
    )).scalar_one()
    return f"{closure_prefix(channel)}-{day.strftime('%Y%m%d')}-{count + 1:03d}"


async def close_register(
    db: AsyncSession,
    final_cash: float,
    notes: str | None,
    user: dict,
    channel: str = RESTAURANT_CHANNEL,
) -> SalesClosure:
    """
    Close the shift: snapshot today's summary into a SalesClosure and reset
    the register.

    cash_difference = final_cash - (initial_cash + cash sales)
    """
    register = await get_register(db, channel)
    if not register.is_open:
        raise RegisterStateError("Cash register is not open.")

    day = local_today()
    summary = await daily_summary(db, day, channel)
    initial_cash = to_money(register.initial_cash)
    final = to_money(final_cash)
    cash_sales = summary["by_payment"][PaymentMethod.CASH.value]

    closure = SalesClosure(
        channel=channel,
        closure_date=day,
        closure_number=await next_closure_number(db, day, channel),
        opened_at=register.opened_at,
        closed_at=utcnow(),
        opened_by=register.opened_by,
        opened_by_name=register.opened_by_name,
        closed_by=user.get("sub"),
        closed_by_name=user.get("name") or user.get("sub"),
        initial_cash=initial_cash,
        final_cash=final,
        cash_difference=final - (initial_cash + cash_sales),
        total_cash=cash_sales,
        total_mobile_wallet=summary["by_payment"][PaymentMethod.MOBILE_WALLET.value],
        total_card=summary["by_payment"][PaymentMethod.CARD.value],
        total_not_applicable=summary["by_payment"][NOT_APPLICABLE],
        total_phone=summary["by_source"]["phone"],
        total_walk_in=summary["by_source"]["walk_in"],
        total_delivery=summary["by_source"]["delivery"],
        total_orders=summary["total_orders"],
        total_amount=summary["total_amount"],
        orders_pending=summary["by_status"]["pending"],
        orders_preparing=summary["by_status"]["preparing"],
        orders_ready=summary["by_status"]["ready"],
        orders_delivered=summary["by_status"]["delivered"],
        orders_cancelled=summary["by_status"]["cancelled"],
        notes=notes,
        top_products=[
            {"name": p["name"], "quantity": p["quantity"], "total": float(p["total"])}
            for p in summary["top_products"]
        ],
    )
    db.add(closure)
    await db.flush()

    register.is_open = False
    register.opened_at = None
    register.opened_by = None
    register.opened_by_name = None
    register.initial_cash = Decimal("0.00")
    register.current_cash = Decimal("0.00")
    register.last_closure_id = closure.id
    await db.commit()

    logger.info(
        "Cash register closed: %s, %d order(s), difference %s",
        closure.closure_number, closure.total_orders, closure.cash_difference,
    )
    return closure


async def list_closures(db: AsyncSession, limit: int, channel: str = RESTAURANT_CHANNEL) -> list[SalesClosure]:
    result = await db.execute(
        select(SalesClosure)
        .where(SalesClosure.channel == channel)
        .order_by(SalesClosure.closed_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_closure(
    db: AsyncSession, closure_id: str, channel: str = RESTAURANT_CHANNEL
) -> SalesClosure | None:
    closure = await db.get(SalesClosure, closure_id)
    if closure is None or closure.channel != channel:
        return None
    return closure
