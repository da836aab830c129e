# healthconnect/utils/audit.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from healthconnect.db import MongoStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Actor:
    """Normalized identity for audit events."""
    user_id: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None

    @staticmethod
    def from_user(user: Optional[dict]) -> "Actor":
        if not user:
            return Actor()
        return Actor(
            user_id=user.get("id"),
            role=user.get("role"),
            email=user.get("email"),
        )

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "role": self.role, "email": self.email}


def write_audit_event(
    store: Optional[MongoStore],
    *,
    action: str,
    ok: bool,
    actor: Optional[dict] = None,
    err: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
    request_ctx: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Write one normalized audit event. Best-effort (never raises).

    Event schema:
    {
      ts, action, ok, err,
      actor: {user_id, role, email},
      meta: {...},
      request: {request_id, method, path, ip, ua}
    }
    """
    if store is None or store.db is None:
        return
    try:
        store.audit_events.insert_one({
            "ts": _utcnow(),
            "action": action,
            "ok": ok,
            "err": err,
            "actor": Actor.from_user(actor).to_dict(),
            "meta": meta or {},
            "request": request_ctx or {},
        })
    except Exception:
        # Never block requests due to audit failure.
        pass
