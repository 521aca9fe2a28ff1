"""
Comanda — Sales reports
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.security import current_user, require_roles
from comanda.db import sales_ops
from comanda.db.database import get_db
from comanda.schemas.sales import SalesSummaryResponse
from comanda.tickets.layout import summary_ticket
from comanda.tickets.render import TicketFormat, ticket_response

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    dependencies=[Depends(require_roles("admin", "manager"))],
)

MAX_RANGE_DAYS = 366


def check_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date.")
    if (end_date - start_date).days >= MAX_RANGE_DAYS:
        raise HTTPException(status_code=400, detail=f"Date range is limited to {MAX_RANGE_DAYS} days.")


@router.get("/summary", response_model=SalesSummaryResponse)
async def sales_summary(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Totals, payment split, top 5 products and a row for every day in the range."""
    check_range(start_date, end_date)
    return await sales_ops.sales_summary(db, start_date, end_date)


@router.get("/summary/ticket.{fmt}")
async def sales_summary_ticket(
    fmt: TicketFormat,
    start_date: date = Query(...),
    end_date: date = Query(...),
    user: dict = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    check_range(start_date, end_date)
    summary = await sales_ops.sales_summary(db, start_date, end_date)
    issued_by = user.get("name") or user.get("sub") or "system"
    return ticket_response(summary_ticket(summary, issued_by), fmt, f"summary-{start_date}-{end_date}")
