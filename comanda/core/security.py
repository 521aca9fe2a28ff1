"""
Comanda — Security helpers

Tokens are issued by the external identity provider (shared HS256 secret);
this service only decodes them. Who the caller is and what they may do is
then read from the employees table: the token's `sub` must match an
active employee's username, and the role comes from that row.
"""
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from jose import jwt

from comanda.core.config import get_settings
from comanda.db import employee_ops
from comanda.db.database import AsyncSessionLocal
from comanda.models.employee import Employee

settings = get_settings()


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def current_user(request: Request) -> dict[str, Any]:
    user = getattr(request.state, "user", None)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.")
    return user


async def current_employee(request: Request) -> Employee:
    """
    Resolve the caller in the staff directory.

    Missing or inactive employees get 403. On success request.state.user
    carries the directory name and role, so later dependencies and
    handlers never see the token's own role claim.
    """
    user = current_user(request)
    # Short-lived session: the SSE stream must not pin a connection.
    async with AsyncSessionLocal() as db:
        employee = await employee_ops.get_by_username(db, user["sub"])

    if employee is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unknown employee.")
    if not employee.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Employee account is inactive.")

    request.state.user = {
        **user,
        "name": employee.name,
        "role": employee.role.value,
        "employee_id": employee.id,
    }
    return employee


def require_roles(*roles: str):
    """Dependency factory: reject employees whose directory role is not in `roles`."""

    def dependency(employee: Employee = Depends(current_employee)) -> Employee:
        if employee.role.value not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(roles)}.",
            )
        return employee

    return dependency
