"""
Comanda — Orders API

Flow for POST /orders:
  1. JWT validated by middleware (request.state.user set)
  2. Idempotency-Key replay handled by IdempotencyMiddleware
  3. Items resolved against the menu, name/price snapshotted
  4. Order committed with its daily ORD-/COM- numbers
  5. Customer stats dispatched to Celery, kitchen screens notified
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import utcnow
from comanda.core.config import get_settings
from comanda.core.events import ORDER_CREATED, ORDER_DELETED, ORDER_STATUS, publish_order_event
from comanda.core.security import require_roles
from comanda.db import order_ops
from comanda.db.database import get_db
from comanda.models.order import Order, OrderSource, OrderStatus
from comanda.schemas.order import (
    OrderListResponse,
    OrderRequest,
    OrderResponse,
    PaymentUpdateRequest,
    StatusUpdateRequest,
)
from comanda.tasks.customer_tasks import record_customer_order
from comanda.tickets.layout import order_ticket
from comanda.tickets.render import TicketFormat, ticket_response

settings = get_settings()
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])

FINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


async def load_order(order_id: str, db: AsyncSession) -> Order:
    order = await order_ops.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found.")
    return order


def dispatch_customer_stats(order: Order) -> None:
    if not order.phone:
        return
    try:
        record_customer_order.delay(order.id)
    except Exception as exc:
        # Stats can be rebuilt later with /customers/{id}/refresh-stats
        logger.warning("Customer stats for order %s not dispatched: %s", order.order_number, exc)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderRequest, db: AsyncSession = Depends(get_db)):
    """Register an order from reception (phone, walk-in or delivery)."""
    try:
        order = await order_ops.create_order(db, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    dispatch_customer_stats(order)
    await publish_order_event(ORDER_CREATED, order)
    return order


@router.get("", response_model=OrderListResponse)
async def list_orders(
    days: int = Query(settings.ORDER_HISTORY_DAYS, ge=1, le=366),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    status_filter: OrderStatus | None = Query(None, alias="status", description="Filter by status"),
    source: OrderSource | None = Query(None, description="Filter by order source"),
    db: AsyncSession = Depends(get_db),
):
    """Order history, newest first, restricted to the last `days` days."""
    total, orders = await order_ops.list_orders(db, days, limit, offset, status_filter, source)
    return {"total": total, "orders": orders}


@router.get("/today", response_model=list[OrderResponse])
async def today_orders(db: AsyncSession = Depends(get_db)):
    return await order_ops.today_orders(db)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, db: AsyncSession = Depends(get_db)):
    return await load_order(order_id, db)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, payload: StatusUpdateRequest, db: AsyncSession = Depends(get_db)
):
    """Overwrite the status with any valid value (manual correction)."""
    order = await load_order(order_id, db)
    await order_ops.set_status(db, order, payload.status)
    await publish_order_event(ORDER_STATUS, order)
    return order


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, db: AsyncSession = Depends(get_db)):
    order = await load_order(order_id, db)
    if order.status in FINAL_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot cancel order in status '{order.status.value}'.",
        )
    await order_ops.set_status(db, order, OrderStatus.CANCELLED)
    await publish_order_event(ORDER_STATUS, order)
    return order


@router.patch("/{order_id}/payment", response_model=OrderResponse)
async def update_order_payment(
    order_id: str, payload: PaymentUpdateRequest, db: AsyncSession = Depends(get_db)
):
    """Set or clear (null = not applicable) the payment method."""
    order = await load_order(order_id, db)
    order.payment_method = payload.payment_method
    order.updated_at = utcnow()
    await db.commit()
    return order


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles("admin", "manager"))],
)
async def delete_order(order_id: str, db: AsyncSession = Depends(get_db)):
    order = await load_order(order_id, db)
    await db.delete(order)
    await db.commit()
    logger.info("Order %s deleted", order.order_number)
    await publish_order_event(ORDER_DELETED, order)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{order_id}/ticket.{fmt}")
async def order_ticket_document(order_id: str, fmt: TicketFormat, db: AsyncSession = Depends(get_db)):
    """Printable 80 mm ticket as HTML, PDF or plain text."""
    order = await load_order(order_id, db)
    return ticket_response(order_ticket(order), fmt, order.order_number)
