from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from fastapi import Request

from tourbook.utils import now_utc

logger = logging.getLogger(__name__)


def _safe_json(v: Any, max_len: int = 2000) -> Any:
    """Keep audit payloads light; truncate long strings."""
    if v is None:
        return None
    if isinstance(v, (int, float, bool)):
        return v
    if isinstance(v, str):
        return v if len(v) <= max_len else v[:max_len] + "…"
    if isinstance(v, list):
        return [_safe_json(x, max_len=max_len) for x in v][:200]
    if isinstance(v, dict):
        out: dict[str, Any] = {}
        for k, val in list(v.items())[:200]:
            out[str(k)] = _safe_json(val, max_len=max_len)
        return out

    s = str(v)
    return s if len(s) <= max_len else s[:max_len] + "…"


def shallow_diff(before: Optional[dict[str, Any]], after: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Return only changed top-level fields as {field: {before, after}}."""
    b = before or {}
    a = after or {}

    diff: dict[str, Any] = {}
    for k in set(b.keys()) | set(a.keys()):
        if k in ("_id", "updatedAt"):
            continue
        bv = b.get(k)
        av = a.get(k)
        if bv != av:
            diff[k] = {"before": _safe_json(bv), "after": _safe_json(av)}
    return diff


def _get_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client:
        return request.client.host
    return ""


def _origin(request: Optional[Request]) -> dict[str, Any]:
    if request is None:
        return {}
    return {
        "ip": _get_ip(request),
        "user_agent": request.headers.get("user-agent", ""),
        "path": str(request.url.path),
        "method": request.method,
        "request_id": request.headers.get("x-request-id", ""),
    }


async def write_audit_log(
    db,
    *,
    actor: Optional[dict[str, Any]],
    request: Optional[Request],
    action: str,
    target_type: str,
    target_id: str,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
    meta: Optional[dict[str, Any]] = None,
) -> None:
    """Persist an audit log entry.

    actor is the serialized user ({id, email, role}); None means system.
    """

    actor = actor or {}
    doc = {
        "_id": str(uuid.uuid4()),
        "actor": {
            "actor_type": "user" if actor else "system",
            "actor_id": actor.get("id"),
            "email": actor.get("email"),
            "role": actor.get("role"),
        },
        "origin": _origin(request),
        "action": action,
        "target": {"type": target_type, "id": target_id},
        "diff": shallow_diff(before, after),
        "meta": _safe_json(meta or {}),
        "createdAt": now_utc(),
    }

    await db.audit_logs.insert_one(doc)


async def write_audit_log_best_effort(db, **kwargs: Any) -> None:
    """write_audit_log for writes that are already committed.

    Audit failures must not break the main flow; they are logged instead.
    """

    try:
        await write_audit_log(db, **kwargs)
    except Exception:
        logger.exception("audit_write_failed action=%s target=%s", kwargs.get("action"), kwargs.get("target_id"))
