"""
Comanda — Employees API (admin only)

Staff directory used for roles and for attributing register openings and
closures. Credentials are handled by the identity provider.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import utcnow
from comanda.core.security import require_roles
from comanda.db.database import get_db
from comanda.models.employee import PROTECTED_USERNAME, Employee
from comanda.schemas.employee import EmployeeCreateRequest, EmployeeResponse, EmployeeUpdateRequest

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/employees",
    tags=["employees"],
    dependencies=[Depends(require_roles("admin"))],
)


async def _load(db: AsyncSession, employee_id: str) -> Employee:
    employee = await db.get(Employee, employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found.")
    return employee


@router.get("", response_model=list[EmployeeResponse])
async def list_employees(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Employee).order_by(Employee.created_at.desc()))
    return result.scalars().all()


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(employee_id: str, db: AsyncSession = Depends(get_db)):
    return await _load(db, employee_id)


@router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(payload: EmployeeCreateRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Employee).where(Employee.username == payload.username))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=409, detail=f"Username '{payload.username}' is already taken.")

    employee = Employee(**payload.model_dump(), is_active=True, created_at=utcnow())
    db.add(employee)
    await db.commit()
    logger.info("Employee %s created with role %s", employee.username, employee.role.value)
    return employee


@router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: str, payload: EmployeeUpdateRequest, db: AsyncSession = Depends(get_db)
):
    employee = await _load(db, employee_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field != "email":
            continue
        setattr(employee, field, value)
    await db.commit()
    return employee


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(employee_id: str, db: AsyncSession = Depends(get_db)):
    employee = await _load(db, employee_id)
    if employee.username == PROTECTED_USERNAME:
        raise HTTPException(status_code=400, detail="The admin account cannot be deleted.")
    await db.delete(employee)
    await db.commit()
    logger.info("Employee %s deleted", employee.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
