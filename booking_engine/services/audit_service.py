from __future__ import annotations

from typing import Any, Mapping

from fastapi import Request
from sqlalchemy.orm import Session

from booking_engine.models.audit_log import AuditLog

SENSITIVE_KEYS = {
    "customer_name",
    "customer_email",
    "customer_phone",
    "email",
    "phone",
    "notes",
}


def _sanitize(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        clean: dict[str, Any] = {}
        for k, v in obj.items():
            if k in SENSITIVE_KEYS:
                clean[k] = "<redacted>"
            else:
                clean[k] = _sanitize(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [_sanitize(v) for v in obj]
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return obj


def write_audit_log(
    db: Session,
    *,
    actor_id: str | None,
    action_type: str,
    target_type: str = "",
    target_id: str = "",
    summary: str = "",
    diff_json: Mapping[str, Any] | None = None,
    request: Request | None = None,
    commit: bool = True,
) -> AuditLog:
    ip = ""
    ua = ""
    if request is not None:
        ip = request.client.host if request.client else ""
        ua = request.headers.get("user-agent", "")[:255]

    log = AuditLog(
        actor_id=actor_id,
        action_type=action_type,
        target_type=target_type,
        target_id=str(target_id),
        summary=summary[:255],
        diff_json=_sanitize(dict(diff_json)) if diff_json is not None else None,
        ip_address=ip,
        user_agent=ua,
    )
    db.add(log)
    if commit:
        db.commit()
    return log
