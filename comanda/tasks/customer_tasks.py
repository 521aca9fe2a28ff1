"""
Comanda — Celery tasks (customer statistics)

Dispatched after an order is committed. The API never waits for these;
a failure here leaves the order intact and is retried by the worker.
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from comanda.core.celery_app import celery_app
from comanda.core.config import get_settings
from comanda.db import customer_ops

settings = get_settings()
logger = logging.getLogger(__name__)

# Sync engine for Celery (Celery tasks are not async-native)
sync_engine = create_engine(settings.sync_database_url, pool_pre_ping=True)


@celery_app.task(
    name="record_customer_order",
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    acks_late=True,
)
def record_customer_order(self, order_id: str):
    """Attribute an order to its customer (by phone) and update their totals."""
    try:
        with Session(sync_engine) as session:
            customer = customer_ops.record_customer_order(session, order_id)
            if customer is not None:
                logger.info(
                    "Customer %s: %d order(s), spent %s",
                    customer.phone, customer.orders_count, customer.total_spent,
                )
    except Exception as exc:
        logger.exception("Customer stats for order %s failed", order_id)
        raise self.retry(exc=exc)
