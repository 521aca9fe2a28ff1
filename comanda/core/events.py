"""
Comanda — Kitchen display events (Redis pub/sub)

Order changes are pushed to a single channel that kitchen and reception
screens subscribe to through the SSE endpoint.
"""
import json
import logging

from comanda.core.clock import utcnow
from comanda.core.config import get_settings
from comanda.core.redis_client import get_redis

settings = get_settings()
logger = logging.getLogger(__name__)

ORDER_CREATED = "order.created"
ORDER_STATUS = "order.status"
ORDER_DELETED = "order.deleted"


async def publish_order_event(event: str, order) -> None:
    """Publish an order change. Failures MUST NOT affect the request."""
    payload = {
        "event": event,
        "order_id": order.id,
        "order_number": order.order_number,
        "kitchen_number": order.kitchen_number,
        "customer_name": order.customer_name,
        "status": order.status.value,
        "timestamp": utcnow().isoformat(),
    }
    try:
        await get_redis().publish(settings.KITCHEN_EVENTS_CHANNEL, json.dumps(payload))
    except Exception as exc:
        logger.warning("Kitchen event %s for order %s not published: %s", event, order.id, exc)
