"""
Comanda — Customers API
"""
import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import utcnow
from comanda.db import customer_ops
from comanda.db.database import get_db
from comanda.models.customer import Customer
from comanda.schemas.customer import CustomerCreateRequest, CustomerResponse, CustomerUpdateRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/customers", tags=["customers"])


async def _by_phone(db: AsyncSession, phone: str) -> Customer | None:
    result = await db.execute(select(Customer).where(Customer.phone == phone))
    return result.scalar_one_or_none()


async def _load(db: AsyncSession, customer_id: str) -> Customer:
    customer = await db.get(Customer, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found.")
    return customer


def _phone_taken(existing: Customer) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": f"A customer with phone {existing.phone} already exists.",
            "customer_id": existing.id,
        },
    )


@router.get("", response_model=list[CustomerResponse])
async def list_customers(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Customer).order_by(Customer.created_at.desc()).limit(limit).offset(offset)
    )
    return result.scalars().all()


@router.get("/by-phone/{phone}", response_model=CustomerResponse)
async def find_by_phone(phone: str, db: AsyncSession = Depends(get_db)):
    """Reception lookup: prefill name/address from a known phone number."""
    customer = await _by_phone(db, phone.strip())
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found.")
    return customer


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: str, db: AsyncSession = Depends(get_db)):
    return await _load(db, customer_id)


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Phone already registered; body carries customer_id"}},
)
async def create_customer(payload: CustomerCreateRequest, db: AsyncSession = Depends(get_db)):
    existing = await _by_phone(db, payload.phone)
    if existing:
        return _phone_taken(existing)

    now = utcnow()
    customer = Customer(
        **payload.model_dump(),
        orders_count=0,
        total_spent=Decimal("0.00"),
        created_at=now,
        updated_at=now,
    )
    db.add(customer)
    await db.commit()
    logger.info("Customer %s created", customer.phone)
    return customer


@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str, payload: CustomerUpdateRequest, db: AsyncSession = Depends(get_db)
):
    customer = await _load(db, customer_id)
    changes = payload.model_dump(exclude_unset=True)

    new_phone = changes.get("phone")
    if new_phone and new_phone != customer.phone:
        existing = await _by_phone(db, new_phone)
        if existing:
            return _phone_taken(existing)

    for field, value in changes.items():
        if value is None and field in ("name", "phone"):
            continue
        setattr(customer, field, value)
    customer.updated_at = utcnow()
    await db.commit()
    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(customer_id: str, db: AsyncSession = Depends(get_db)):
    customer = await _load(db, customer_id)
    await db.delete(customer)
    await db.commit()
    logger.info("Customer %s deleted", customer.phone)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{customer_id}/refresh-stats", response_model=CustomerResponse)
async def refresh_customer_stats(customer_id: str, db: AsyncSession = Depends(get_db)):
    """Recompute totals from the orders linked to this customer."""
    customer = await _load(db, customer_id)
    return await customer_ops.refresh_customer_stats(db, customer)
