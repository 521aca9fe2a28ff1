"""
Comanda — Kitchen display routes

Board, one-step status moves and a live event stream.
The stream replaces client polling: screens subscribe once and receive
order.created / order.status / order.deleted events pushed through Redis.
"""
import asyncio
import json
import logging
import time
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.config import get_settings
from comanda.core.events import ORDER_STATUS, publish_order_event
from comanda.core.redis_client import get_redis
from comanda.db import order_ops
from comanda.db.database import get_db
from comanda.models.order import OrderStatus
from comanda.schemas.order import KitchenBoardResponse, OrderResponse

settings = get_settings()
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/kitchen", tags=["kitchen"])

BOARD_STATUSES = [OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY]

# ── Manual status transition maps ─────────────────────────────────────────────
NEXT_STATUS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING:   OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY:     OrderStatus.DELIVERED,
}
PREV_STATUS: dict[OrderStatus, OrderStatus] = {
    OrderStatus.DELIVERED: OrderStatus.READY,
    OrderStatus.READY:     OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.PENDING,
}


@router.get("/board", response_model=KitchenBoardResponse)
async def kitchen_board(db: AsyncSession = Depends(get_db)):
    """Active orders per column, oldest first."""
    orders = await order_ops.orders_with_status(db, BOARD_STATUSES)
    board = {status.value: [] for status in BOARD_STATUSES}
    for order in orders:
        board[order.status.value].append(order)
    return board


async def _move(order_id: str, transitions: dict, verb: str, db: AsyncSession):
    order = await order_ops.get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found.")
    target = transitions.get(order.status)
    if not target:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot {verb} order from status '{order.status.value}'.",
        )
    await order_ops.set_status(db, order, target)
    await publish_order_event(ORDER_STATUS, order)
    return order


@router.post("/orders/{order_id}/advance", response_model=OrderResponse)
async def advance_order(order_id: str, db: AsyncSession = Depends(get_db)):
    """Move an order to the next stage (kitchen staff action)."""
    return await _move(order_id, NEXT_STATUS, "advance", db)


@router.post("/orders/{order_id}/revert", response_model=OrderResponse)
async def revert_order(order_id: str, db: AsyncSession = Depends(get_db)):
    """Move an order back one stage (error correction)."""
    return await _move(order_id, PREV_STATUS, "revert", db)


async def kitchen_events(request: Request) -> AsyncGenerator[str, None]:
    """Subscribe to the kitchen channel and yield SSE frames until the client leaves."""
    redis = get_redis()
    pubsub = redis.pubsub()
    await pubsub.subscribe(settings.KITCHEN_EVENTS_CHANNEL)

    try:
        yield f"retry: {settings.SSE_RETRY_MILLISECONDS}\n\n"
        yield ": connected\n\n"
        last_sent = time.monotonic()

        while True:
            if await request.is_disconnected():
                break

            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            if message and message["type"] == "message":
                data = message["data"]
                try:
                    payload = json.loads(data)
                except (TypeError, ValueError):
                    logger.warning("Dropping malformed kitchen event: %r", data)
                    continue
                yield f"event: {payload.get('event', 'message')}\ndata: {json.dumps(payload)}\n\n"
                last_sent = time.monotonic()
            elif time.monotonic() - last_sent >= settings.SSE_KEEPALIVE_INTERVAL_SECONDS:
                yield ": keepalive\n\n"
                last_sent = time.monotonic()
            else:
                await asyncio.sleep(0.1)
    finally:
        await pubsub.unsubscribe(settings.KITCHEN_EVENTS_CHANNEL)
        await pubsub.aclose()


@router.get("/stream")
async def kitchen_stream(request: Request):
    return StreamingResponse(
        kitchen_events(request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
