"""
Comanda — Idempotency Key Middleware

Guards order creation against double submission from the reception screen:
  - Cache hit  → return the stored response (no second order)
  - Cache miss → execute handler, store response in Redis for the TTL
Keys are scoped per authenticated employee.
"""
import json
import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from comanda.core.config import get_settings
from comanda.core.redis_client import get_redis

settings = get_settings()
logger = logging.getLogger(__name__)

IDEMPOTENCY_PREFIX = "idempotent:"
IDEMPOTENCY_METHODS = {"POST"}
IDEMPOTENCY_PATHS = {"/orders", "/orders/"}


class IdempotencyMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method not in IDEMPOTENCY_METHODS:
            return await call_next(request)

        if request.url.path not in IDEMPOTENCY_PATHS:
            return await call_next(request)

        idem_key = request.headers.get("Idempotency-Key")
        if not idem_key:
            return await call_next(request)

        user = getattr(request.state, "user", None) or {}
        cache_key = f"{IDEMPOTENCY_PREFIX}{user.get('sub', 'anonymous')}:{idem_key}"
        redis = get_redis()

        try:
            cached = await redis.get(cache_key)
        except Exception as exc:
            logger.warning("Idempotency cache unavailable, processing request normally: %s", exc)
            return await call_next(request)

        if cached:
            data = json.loads(cached)
            return JSONResponse(
                content=data["body"],
                status_code=data["status_code"],
                headers={"X-Idempotency-Replay": "true"},
            )

        response = await call_next(request)

        body_bytes = b""
        async for chunk in response.body_iterator:
            body_bytes += chunk

        # Only successful creations are replayed; a rejected order may be retried.
        if 200 <= response.status_code < 300:
            try:
                body = json.loads(body_bytes)
                await redis.setex(
                    cache_key,
                    settings.IDEMPOTENCY_KEY_TTL_SECONDS,
                    json.dumps({"body": body, "status_code": response.status_code}),
                )
            except Exception as exc:
                logger.warning("Could not store idempotent response for %s: %s", idem_key, exc)

        return Response(
            content=body_bytes,
            status_code=response.status_code,
            media_type=response.media_type,
            headers=dict(response.headers),
        )
