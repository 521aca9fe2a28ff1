"""
Comanda — JWT Authentication Middleware

Every route except the public ones needs a Bearer token from the identity
provider. Claims land on request.state.user as {sub, name, role}.

Browsers cannot set headers on an EventSource, so the kitchen stream also
accepts the token as ?access_token=.
"""
import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware

from comanda.core.security import decode_token

logger = logging.getLogger(__name__)

PUBLIC_PATHS = {
    "/",
    "/health",
    "/metrics",
    "/docs",
    "/openapi.json",
}
QUERY_TOKEN_PATHS = {"/kitchen/stream"}
DEFAULT_ROLE = "employee"


def _unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    if request.url.path in QUERY_TOKEN_PATHS:
        return request.query_params.get("access_token")
    return None


class JWTAuthMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS" or request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        token = _extract_token(request)
        if not token:
            return _unauthorized("Missing or invalid Authorization header. Expected: Bearer <token>")

        try:
            claims = decode_token(token)
        except JWTError as exc:
            logger.info("Rejected token on %s %s: %s", request.method, request.url.path, exc)
            return _unauthorized(f"Invalid or expired JWT: {exc}")

        sub = claims.get("sub")
        if not sub:
            return _unauthorized("JWT is missing the 'sub' claim.")

        request.state.user = {
            **claims,
            "sub": sub,
            "name": claims.get("name") or sub,
            "role": claims.get("role") or DEFAULT_ROLE,
        }
        return await call_next(request)
