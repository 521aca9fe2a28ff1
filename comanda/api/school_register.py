"""
Comanda — School lunch cash registers and reports

Each lunch programme runs its own register and closures, independent of
the restaurant register and of each other. Closure numbers carry the
channel: CLS-FD-, CLS-OEP-, CLS-LON-YYYYMMDD-NNN.
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.api.reports import check_range
from comanda.core.security import current_user, require_roles
from comanda.db import sales_ops
from comanda.db.database import get_db
from comanda.models.school import SchoolChannel
from comanda.schemas.sales import (
    CashRegisterResponse,
    DailySummaryResponse,
    RegisterCloseRequest,
    RegisterOpenRequest,
    SalesClosureResponse,
    SalesSummaryResponse,
)
from comanda.tickets.layout import closure_ticket, summary_ticket
from comanda.tickets.render import TicketFormat, ticket_response

router = APIRouter(prefix="/school/{channel}", tags=["school-register"])

can_view_reports = Depends(require_roles("admin", "manager"))


@router.get("/cash-register", response_model=CashRegisterResponse)
async def school_register_status(channel: SchoolChannel, db: AsyncSession = Depends(get_db)):
    return await sales_ops.get_register(db, channel.value)


@router.post("/cash-register/open", response_model=CashRegisterResponse)
async def open_school_register(
    channel: SchoolChannel,
    payload: RegisterOpenRequest,
    user: dict = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await sales_ops.open_register(db, payload.initial_cash, user, channel.value)
    except sales_ops.RegisterStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("/cash-register/summary", response_model=DailySummaryResponse)
async def school_daily_summary(channel: SchoolChannel, db: AsyncSession = Depends(get_db)):
    return await sales_ops.daily_summary(db, channel=channel.value)


@router.post(
    "/cash-register/close",
    response_model=SalesClosureResponse,
    status_code=status.HTTP_201_CREATED,
)
async def close_school_register(
    channel: SchoolChannel,
    payload: RegisterCloseRequest,
    user: dict = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await sales_ops.close_register(db, payload.final_cash, payload.notes, user, channel.value)
    except sales_ops.RegisterStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


@router.get("/cash-register/closures", response_model=list[SalesClosureResponse])
async def list_school_closures(
    channel: SchoolChannel,
    limit: int = Query(30, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
):
    return await sales_ops.list_closures(db, limit, channel.value)


async def _load_closure(channel: SchoolChannel, closure_id: str, db: AsyncSession):
    closure = await sales_ops.get_closure(db, closure_id, channel.value)
    if not closure:
        raise HTTPException(status_code=404, detail="Closure not found.")
    return closure


@router.get("/cash-register/closures/{closure_id}", response_model=SalesClosureResponse)
async def get_school_closure(channel: SchoolChannel, closure_id: str, db: AsyncSession = Depends(get_db)):
    return await _load_closure(channel, closure_id, db)


@router.get("/cash-register/closures/{closure_id}/ticket.{fmt}")
async def school_closure_ticket(
    channel: SchoolChannel, closure_id: str, fmt: TicketFormat, db: AsyncSession = Depends(get_db)
):
    closure = await _load_closure(channel, closure_id, db)
    return ticket_response(closure_ticket(closure), fmt, closure.closure_number)


@router.get("/reports/summary", response_model=SalesSummaryResponse, dependencies=[can_view_reports])
async def school_sales_summary(
    channel: SchoolChannel,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    check_range(start_date, end_date)
    return await sales_ops.sales_summary(db, start_date, end_date, channel.value)


@router.get("/reports/summary/ticket.{fmt}", dependencies=[can_view_reports])
async def school_sales_summary_ticket(
    channel: SchoolChannel,
    fmt: TicketFormat,
    start_date: date = Query(...),
    end_date: date = Query(...),
    user: dict = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    check_range(start_date, end_date)
    summary = await sales_ops.sales_summary(db, start_date, end_date, channel.value)
    issued_by = user.get("name") or user.get("sub") or "system"
    ticket = summary_ticket(summary, issued_by, channel.value)
    return ticket_response(ticket, fmt, f"{channel.value}-summary-{start_date}-{end_date}")
