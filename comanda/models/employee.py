"""
Comanda — Employee model (configuration data, not transactional)

Credentials live with the external identity provider; this table only
carries the staff directory used for roles and ticket/closure attribution.
"""
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from comanda.core.clock import utcnow
from comanda.db.database import Base

PROTECTED_USERNAME = "admin"


class EmployeeRole(str, PyEnum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[EmployeeRole] = mapped_column(
        Enum(EmployeeRole, name="employee_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=EmployeeRole.EMPLOYEE,
    )
    display_role: Mapped[str] = mapped_column(String(64), nullable=False, default="CASHIER 01")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<Employee username={self.username} role={self.role.value}>"
