from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from booking_engine.core.security import create_access_token
from booking_engine.models.resource import Resource

RESOURCE_DEFAULTS = dict(
    owner_id="owner-1",
    name="Main Hall",
    type="space",
    slot_granularity_minutes=30,
    duration_minutes=240,
    min_notice_hours=24,
    booking_window_days=180,
    daily_capacity=1,
    concurrent_capacity=1,
    buffer_before_minutes=60,
    buffer_after_minutes=60,
    is_active=True,
    tz="America/Sao_Paulo",
)

# Monday 2026-10-19 12:00 UTC
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def build_resource(**overrides) -> Resource:
    """Transient resource with every scheduling field set (no DB defaults needed)."""
    data = dict(RESOURCE_DEFAULTS)
    data.setdefault("id", "res-1")
    data.update(overrides)
    return Resource(**data)


def next_weekday(start: date, weekday: int) -> date:
    """Next date strictly after ``start`` whose Sunday-based weekday matches."""
    d = start + timedelta(days=1)
    while d.isoweekday() % 7 != weekday:
        d += timedelta(days=1)
    return d


def auth_headers(requester_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(requester_id)}"}
