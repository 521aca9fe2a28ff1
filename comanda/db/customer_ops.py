"""
Comanda — Customer statistics

record_customer_order runs inside the Celery worker (sync Session);
refresh_customer_stats is called from the API (AsyncSession).
"""
import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from comanda.core.clock import as_utc, utcnow
from comanda.models.customer import Customer
from comanda.models.order import Order

logger = logging.getLogger(__name__)


def record_customer_order(session: Session, order_id: str) -> Customer | None:
    """
    Fold one order into its customer's aggregates.

    The customer is matched by phone and created on first order. Orders
    without a phone are not attributed to anybody.
    """
    order = session.get(Order, order_id)
    if order is None:
        logger.warning("Order %s vanished before customer stats were recorded", order_id)
        return None
    if not order.phone:
        return None
    if order.customer_id:
        # Already counted; a redelivered task must not double the totals.
        return session.get(Customer, order.customer_id)

    customer = session.execute(
        select(Customer).where(Customer.phone == order.phone)
    ).scalar_one_or_none()
    if customer is None:
        customer = Customer(
            name=order.customer_name,
            phone=order.phone,
            address=order.address,
            orders_count=0,
            total_spent=Decimal("0.00"),
        )
        session.add(customer)
        session.flush()
        logger.info("Customer %s created from order %s", customer.phone, order.order_number)
    elif order.address and not customer.address:
        customer.address = order.address

    customer.orders_count += 1
    customer.total_spent = Decimal(customer.total_spent) + Decimal(order.total)
    customer.last_order = order.created_at
    customer.updated_at = utcnow()
    order.customer_id = customer.id
    session.commit()
    return customer


async def refresh_customer_stats(db: AsyncSession, customer: Customer) -> Customer:
    """Recompute orders_count / total_spent / last_order from linked orders."""
    row = (await db.execute(
        select(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total), 0),
            func.max(Order.created_at),
        ).where(Order.customer_id == customer.id)
    )).one()

    count, spent, last_order = row
    customer.orders_count = count
    customer.total_spent = Decimal(str(spent)).quantize(Decimal("0.01"))
    customer.last_order = as_utc(last_order) if last_order is not None else None
    customer.updated_at = utcnow()
    await db.commit()
    return customer
