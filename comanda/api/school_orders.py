"""
Comanda — School lunch orders API

One set of routes serves the three lunch programmes; the {channel} path
segment (fullday, oep, loncheritas) scopes every query, so an order from
one channel is a 404 under another.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import utcnow
from comanda.core.config import get_settings
from comanda.core.security import require_roles
from comanda.db import school_ops
from comanda.db.database import get_db
from comanda.models.order import OrderStatus
from comanda.models.school import SchoolChannel, SchoolOrder
from comanda.schemas.order import PaymentUpdateRequest, StatusUpdateRequest
from comanda.schemas.school import SchoolOrderListResponse, SchoolOrderRequest, SchoolOrderResponse
from comanda.tickets.layout import school_order_ticket
from comanda.tickets.render import TicketFormat, ticket_response

settings = get_settings()
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/school/{channel}/orders", tags=["school-orders"])

FINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


async def load_order(channel: SchoolChannel, order_id: str, db: AsyncSession) -> SchoolOrder:
    order = await school_ops.get_order(db, channel, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found.")
    return order


@router.post("", response_model=SchoolOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_school_order(
    channel: SchoolChannel, payload: SchoolOrderRequest, db: AsyncSession = Depends(get_db)
):
    try:
        return await school_ops.create_order(db, channel, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=SchoolOrderListResponse)
async def list_school_orders(
    channel: SchoolChannel,
    days: int = Query(settings.ORDER_HISTORY_DAYS, ge=1, le=366),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    status_filter: OrderStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    total, orders = await school_ops.list_orders(db, channel, days, limit, offset, status_filter)
    return {"total": total, "orders": orders}


@router.get("/today", response_model=list[SchoolOrderResponse])
async def today_school_orders(channel: SchoolChannel, db: AsyncSession = Depends(get_db)):
    return await school_ops.today_orders(db, channel)


@router.get("/{order_id}", response_model=SchoolOrderResponse)
async def get_school_order(channel: SchoolChannel, order_id: str, db: AsyncSession = Depends(get_db)):
    return await load_order(channel, order_id, db)


@router.patch("/{order_id}/status", response_model=SchoolOrderResponse)
async def update_school_order_status(
    channel: SchoolChannel,
    order_id: str,
    payload: StatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    order = await load_order(channel, order_id, db)
    return await school_ops.set_status(db, order, payload.status)


@router.post("/{order_id}/cancel", response_model=SchoolOrderResponse)
async def cancel_school_order(channel: SchoolChannel, order_id: str, db: AsyncSession = Depends(get_db)):
    order = await load_order(channel, order_id, db)
    if order.status in FINAL_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot cancel order in status '{order.status.value}'.",
        )
    return await school_ops.set_status(db, order, OrderStatus.CANCELLED)


@router.patch("/{order_id}/payment", response_model=SchoolOrderResponse)
async def update_school_order_payment(
    channel: SchoolChannel,
    order_id: str,
    payload: PaymentUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    order = await load_order(channel, order_id, db)
    order.payment_method = payload.payment_method
    order.updated_at = utcnow()
    await db.commit()
    return order


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles("admin", "manager"))],
)
async def delete_school_order(channel: SchoolChannel, order_id: str, db: AsyncSession = Depends(get_db)):
    order = await load_order(channel, order_id, db)
    await db.delete(order)
    await db.commit()
    logger.info("School order %s deleted", order.order_number)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{order_id}/ticket.{fmt}")
async def school_order_ticket_document(
    channel: SchoolChannel, order_id: str, fmt: TicketFormat, db: AsyncSession = Depends(get_db)
):
    order = await load_order(channel, order_id, db)
    return ticket_response(school_order_ticket(order), fmt, order.order_number)
