"""Audit logging middleware — records every state-changing request to activity_logs."""

import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from propertyhub.core.security import decode_access_token
from propertyhub.db.base import async_session_factory
from propertyhub.repositories.activity import ActivityLogRepository

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
_UUID_LENGTH = 36


def _user_id_from(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    payload = decode_access_token(token)
    return payload.get("sub") if payload else None


def _singular(segment: str) -> str:
    if segment.endswith("ies"):
        return segment[:-3] + "y"
    if segment.endswith("s") and not segment.endswith("ss"):
        return segment[:-1]
    return segment


def _entity_from(path: str) -> tuple[str | None, str | None]:
    # /api/v1/properties/<uuid>/favorite -> ("property", "<uuid>")
    parts = [p for p in path.strip("/").split("/") if p]
    for index in range(len(parts) - 1, 0, -1):
        if len(parts[index]) == _UUID_LENGTH:
            return _singular(parts[index - 1]), parts[index]
    return (_singular(parts[-1]) if parts else None), None


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each row is written by a separate task AFTER the response is produced so
    auditing never adds latency to the request. Failures are logged, never
    raised to the caller.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            # Fire-and-forget: don't await here so the response is not delayed
            asyncio.create_task(self._record(request, response.status_code, duration_ms))

        return response

    async def _record(self, request: Request, status_code: int, duration_ms: int) -> None:
        entity_type, entity_id = _entity_from(request.url.path)
        try:
            async with async_session_factory() as session:
                await ActivityLogRepository(session).record(
                    action=f"{request.method}:{status_code}",
                    category="http",
                    user_id=_user_id_from(request),
                    entity_type=entity_type,
                    entity_id=entity_id,
                    details=f"{request.method} {request.url.path} → {status_code} ({duration_ms}ms)",
                    ip_address=request.client.host if request.client else None,
                    user_agent=request.headers.get("user-agent"),
                )
                await session.commit()
        except Exception:
            logger.exception("Audit logging failed for %s %s", request.method, request.url.path)
