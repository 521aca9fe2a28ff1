"""
Comanda — Celery application

Redis is both broker and result backend. The API only fires tasks and
never waits on results; workers run in a separate container (pos-worker):

    celery -A comanda.core.celery_app.celery_app worker --loglevel=info
"""
from celery import Celery

from comanda.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "comanda",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["comanda.tasks.customer_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    timezone=settings.TIMEZONE,
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_ignore_result=True,
    # A broker outage must fail the dispatch fast; the order is already saved.
    broker_connection_timeout=settings.HEALTH_CHECK_TIMEOUT,
    task_publish_retry=False,
    # Tests and single-process setups run tasks inline.
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_eager_propagates=True,
)
