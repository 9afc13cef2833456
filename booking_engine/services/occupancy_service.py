"""
Occupied interval source.

Unifies the three kinds of committed time ranges a new candidate must not
intersect: bookings in pending/confirmed, live holds and imported external
events. Buffers are always applied to the candidate, never to the occupied
intervals themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from booking_engine.models.booking import BOOKING_OCCUPYING_STATUSES, Booking
from booking_engine.models.external_event import ExternalEvent
from booking_engine.models.hold import HOLD_ACTIVE, Hold
from booking_engine.models.resource import Resource

logger = logging.getLogger(__name__)

SOURCE_BOOKING = "booking"
SOURCE_HOLD = "hold"
SOURCE_EXTERNAL = "external"

ALL_SOURCES = (SOURCE_BOOKING, SOURCE_HOLD, SOURCE_EXTERNAL)


@dataclass(frozen=True)
class OccupiedInterval:
    start_t: datetime
    end_t: datetime
    source: str = SOURCE_BOOKING
    ref_id: str | None = None


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval intersection."""
    return a_start < b_end and b_start < a_end


def occupancy_window(resource: Resource, start_t: datetime, end_t: datetime) -> tuple[datetime, datetime]:
    return (
        start_t - timedelta(minutes=resource.buffer_before_minutes),
        end_t + timedelta(minutes=resource.buffer_after_minutes),
    )


def _peak_concurrency(window_start: datetime, window_end: datetime, intervals: Iterable[OccupiedInterval]) -> int:
    points: list[tuple[datetime, int]] = []
    for iv in intervals:
        points.append((max(iv.start_t, window_start), 1))
        points.append((min(iv.end_t, window_end), -1))
    # ends sort before starts at the same instant (half-open)
    points.sort(key=lambda p: (p[0], p[1]))

    peak = current = 0
    for _, delta in points:
        current += delta
        peak = max(peak, current)
    return peak


def blocking_intervals(
    window_start: datetime,
    window_end: datetime,
    occupied: Sequence[OccupiedInterval],
    concurrent_capacity: int = 1,
) -> list[OccupiedInterval]:
    """Return the occupied intervals that make ``[window_start, window_end)`` unbookable.

    External events always block. Bookings and holds block once their peak
    simultaneous count inside the window reaches ``concurrent_capacity``.
    An empty list means the window is free.
    """
    hits = [iv for iv in occupied if overlaps(window_start, window_end, iv.start_t, iv.end_t)]
    if not hits:
        return []

    if any(iv.source == SOURCE_EXTERNAL for iv in hits):
        return hits

    capacity = max(concurrent_capacity or 1, 1)
    if capacity == 1 or _peak_concurrency(window_start, window_end, hits) >= capacity:
        return hits
    return []


def load_occupied_intervals(
    db: Session,
    *,
    resource_id: str,
    window_start: datetime,
    window_end: datetime,
    now: datetime,
    sources: Iterable[str] = ALL_SOURCES,
    exclude_hold_id: str | None = None,
) -> list[OccupiedInterval]:
    sources = set(sources)
    intervals: list[OccupiedInterval] = []

    if SOURCE_BOOKING in sources:
        rows = db.execute(
            select(Booking.id, Booking.start_t, Booking.end_t)
            .where(Booking.resource_id == resource_id)
            .where(Booking.status.in_(BOOKING_OCCUPYING_STATUSES))
            .where(Booking.start_t < window_end)
            .where(Booking.end_t > window_start)
        ).all()
        intervals.extend(OccupiedInterval(r.start_t, r.end_t, SOURCE_BOOKING, r.id) for r in rows)

    if SOURCE_HOLD in sources:
        q = (
            select(Hold.id, Hold.start_t, Hold.end_t)
            .where(Hold.resource_id == resource_id)
            .where(Hold.status == HOLD_ACTIVE)
            .where(Hold.expires_at > now)
            .where(Hold.start_t < window_end)
            .where(Hold.end_t > window_start)
        )
        if exclude_hold_id:
            q = q.where(Hold.id != exclude_hold_id)
        rows = db.execute(q).all()
        intervals.extend(OccupiedInterval(r.start_t, r.end_t, SOURCE_HOLD, r.id) for r in rows)

    if SOURCE_EXTERNAL in sources:
        rows = db.execute(
            select(ExternalEvent.id, ExternalEvent.start_t, ExternalEvent.end_t)
            .where(ExternalEvent.resource_id == resource_id)
            .where(ExternalEvent.start_t < window_end)
            .where(ExternalEvent.end_t > window_start)
        ).all()
        intervals.extend(OccupiedInterval(r.start_t, r.end_t, SOURCE_EXTERNAL, r.id) for r in rows)

    intervals.sort(key=lambda iv: (iv.start_t, iv.end_t))
    return intervals


def find_conflicts(
    db: Session,
    *,
    resource: Resource,
    start_t: datetime,
    end_t: datetime,
    now: datetime,
    sources: Iterable[str] = ALL_SOURCES,
    exclude_hold_id: str | None = None,
) -> list[OccupiedInterval]:
    window_start, window_end = occupancy_window(resource, start_t, end_t)
    occupied = load_occupied_intervals(
        db,
        resource_id=resource.id,
        window_start=window_start,
        window_end=window_end,
        now=now,
        sources=sources,
        exclude_hold_id=exclude_hold_id,
    )
    return blocking_intervals(window_start, window_end, occupied, resource.concurrent_capacity)


def lock_resource(db: Session, resource_id: str) -> Resource | None:
    """Take a row lock on the resource for the rest of the transaction.

    Every writer that checks for conflicts and then inserts a hold or booking
    goes through this first, so writers on one resource queue up behind each
    other. SQLite has no row locks and ignores the clause.
    """
    return db.execute(select(Resource).where(Resource.id == resource_id).with_for_update()).scalar_one_or_none()
