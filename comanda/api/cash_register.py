"""
Comanda — Cash register API

One register per restaurant. Opening records the employee from the
verified token; closing snapshots the day's sales into a SalesClosure.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.security import current_user
from comanda.db import sales_ops
from comanda.db.database import get_db
from comanda.schemas.sales import (
    CashRegisterResponse,
    DailySummaryResponse,
    RegisterCloseRequest,
    RegisterOpenRequest,
    SalesClosureResponse,
)
from comanda.tickets.layout import closure_ticket
from comanda.tickets.render import TicketFormat, ticket_response

router = APIRouter(prefix="/cash-register", tags=["cash-register"])


@router.get("", response_model=CashRegisterResponse)
async def register_status(db: AsyncSession = Depends(get_db)):
    return await sales_ops.get_register(db)


@router.post("/open", response_model=CashRegisterResponse)
async def open_register(
    payload: RegisterOpenRequest,
    user: dict = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await sales_ops.open_register(db, payload.initial_cash, user)
    except sales_ops.RegisterStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("/summary", response_model=DailySummaryResponse)
async def daily_summary(db: AsyncSession = Depends(get_db)):
    """Today's totals by payment method, source and status, plus top 10 products."""
    return await sales_ops.daily_summary(db)


@router.post("/close", response_model=SalesClosureResponse, status_code=status.HTTP_201_CREATED)
async def close_register(
    payload: RegisterCloseRequest,
    user: dict = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await sales_ops.close_register(db, payload.final_cash, payload.notes, user)
    except sales_ops.RegisterStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("/closures", response_model=list[SalesClosureResponse])
async def list_closures(limit: int = Query(30, ge=1, le=365), db: AsyncSession = Depends(get_db)):
    return await sales_ops.list_closures(db, limit)


async def _load_closure(closure_id: str, db: AsyncSession):
    closure = await sales_ops.get_closure(db, closure_id)
    if not closure:
        raise HTTPException(status_code=404, detail="Closure not found.")
    return closure


@router.get("/closures/{closure_id}", response_model=SalesClosureResponse)
async def get_closure(closure_id: str, db: AsyncSession = Depends(get_db)):
    return await _load_closure(closure_id, db)


@router.get("/closures/{closure_id}/ticket.{fmt}")
async def closure_ticket_document(closure_id: str, fmt: TicketFormat, db: AsyncSession = Depends(get_db)):
    closure = await _load_closure(closure_id, db)
    return ticket_response(closure_ticket(closure), fmt, closure.closure_number)
