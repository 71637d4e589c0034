"""Structured JSON access logging.

Every request logs one line:
{
  request_id,
  user_id,
  path,
  method,
  status_code,
  latency_ms
}

The request id is echoed back in the X-Request-Id response header.
"""
from __future__ import annotations

import json
import logging
import time
import uuid

import jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("structured_access")


def _extract_user_id(request: Request) -> str:
    """Read the token subject without verifying it (logging only)."""
    auth = request.headers.get("authorization", "")
    if not auth.lower().startswith("bearer "):
        return ""
    token = auth.split(" ", 1)[1].strip()
    try:
        data = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return ""
    return str(data.get("sub") or "")


def _log_entry(request: Request, request_id: str, status_code: int, start: float) -> dict:
    return {
        "request_id": request_id,
        "user_id": _extract_user_id(request),
        "path": request.url.path,
        "method": request.method,
        "status_code": status_code,
        "latency_ms": round((time.monotonic() - start) * 1000, 2),
    }


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log structured JSON for every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())[:12]
        start = time.monotonic()
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception:
            logger.error(json.dumps(_log_entry(request, request_id, 500, start)))
            raise

        entry = _log_entry(request, request_id, response.status_code, start)
        if response.status_code >= 500:
            logger.error(json.dumps(entry))
        elif response.status_code >= 400:
            logger.warning(json.dumps(entry))
        else:
            logger.info(json.dumps(entry))

        response.headers["X-Request-Id"] = request_id
        return response
