"""
Comanda — Staff directory lookups

A token's `sub` is the employee username. The directory row, not the
token, decides whether the caller is active and which role they hold.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from comanda.core.clock import utcnow
from comanda.models.employee import PROTECTED_USERNAME, Employee, EmployeeRole

logger = logging.getLogger(__name__)


def normalize_username(username: str) -> str:
    return username.strip().lower()


async def get_by_username(db: AsyncSession, username: str) -> Employee | None:
    result = await db.execute(
        select(Employee).where(Employee.username == normalize_username(username))
    )
    return result.scalar_one_or_none()


async def ensure_admin_account(db: AsyncSession) -> Employee:
    """Create the protected admin row on first start so the directory can be managed."""
    admin = await get_by_username(db, PROTECTED_USERNAME)
    if admin is None:
        admin = Employee(
            username=PROTECTED_USERNAME,
            name="Administrator",
            role=EmployeeRole.ADMIN,
            display_role="ADMIN",
            is_active=True,
            created_at=utcnow(),
        )
        db.add(admin)
        await db.commit()
        logger.info("Bootstrap admin account created")
    return admin
