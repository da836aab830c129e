# healthconnect/middleware/audit_middleware.py
from __future__ import annotations

import logging
import uuid
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from healthconnect.utils.audit import write_audit_event

logger = logging.getLogger("healthconnect")


def _client_ip(request: Request) -> str:
    # Prefer X-Forwarded-For if present (proxies)
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else ""


def _request_ctx(request: Request, request_id: str) -> dict:
    return {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "ip": _client_ip(request),
        "ua": request.headers.get("user-agent", ""),
    }


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Adds request_id + writes an audit record for denied/failed requests.
    Unhandled errors become a 500 here so they still carry x-request-id.
    Routes log their own successful actions through ``log_activity``.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        store = getattr(request.app.state, "store", None)

        try:
            response = await call_next(request)
        except Exception as e:
            write_audit_event(
                store,
                action="server_error",
                ok=False,
                actor=getattr(request.state, "actor", None),
                err=repr(e),
                request_ctx=_request_ctx(request, request_id),
            )
            logger.exception("unhandled error on %s %s", request.method, request.url.path)
            response = JSONResponse({"detail": f"Server error: {e}"}, status_code=500)

        response.headers["x-request-id"] = request_id

        if response.status_code in (401, 403):
            write_audit_event(
                store,
                action="permission_denied" if response.status_code == 403 else "auth_missing_or_invalid",
                ok=False,
                actor=getattr(request.state, "actor", None),
                err=f"HTTP {response.status_code}",
                request_ctx=_request_ctx(request, request_id),
            )

        return response
