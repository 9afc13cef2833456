"""
Slot generation.

Turns a resource's scheduling rules plus the occupied intervals around it into
the ordered list of bookable slots. Everything here is pure: callers load the
inputs and pass ``now`` explicitly so the output is reproducible.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Sequence
from zoneinfo import ZoneInfo

from booking_engine.core.errors import ValidationError
from booking_engine.models.resource import Resource
from booking_engine.models.resource_exception import ResourceException
from booking_engine.models.working_hours import WorkingHoursRule
from booking_engine.services.calendar_service import resolve_open_intervals, weekday_index
from booking_engine.services.occupancy_service import OccupiedInterval, blocking_intervals


@dataclass(frozen=True)
class TimeSlot:
    start_t: datetime
    end_t: datetime


def iter_days(start: date, end: date) -> Iterator[date]:
    cur = start
    while cur <= end:
        yield cur
        cur = cur + timedelta(days=1)


def local_interval_to_utc(day: date, start: time, end: time, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Anchor a resource-local open interval on ``day`` and convert it to UTC.

    An end at or before the start (typically 00:00) rolls over to the next day.
    """
    start_local = datetime.combine(day, start, tzinfo=tz)
    end_day = day if end > start else day + timedelta(days=1)
    end_local = datetime.combine(end_day, end, tzinfo=tz)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def generate_slots(
    resource: Resource,
    rules: Sequence[WorkingHoursRule],
    exceptions: Sequence[ResourceException],
    occupied: Sequence[OccupiedInterval],
    window_from: date,
    window_to: date,
    *,
    now: datetime,
    duration_minutes: int | None = None,
    limit: int | None = None,
) -> list[TimeSlot]:
    """Return the bookable slots of ``resource`` between two local dates (inclusive).

    For every open interval of every day the cursor walks forward from the
    interval start by ``slot_granularity_minutes``. The candidate occupancy
    window is the slot widened by the resource buffers and has to fit inside
    the open interval.
    A candidate is kept when it starts after the notice window, inside the
    booking horizon, and its occupancy window is not blocked by ``occupied``.
    """
    if not resource.is_active:
        return []

    if resource.slot_granularity_minutes <= 0:
        raise ValidationError("slot_granularity_minutes must be positive")

    tz = ZoneInfo(resource.tz)
    duration = timedelta(minutes=duration_minutes or resource.duration_minutes)
    step = timedelta(minutes=resource.slot_granularity_minutes)
    buffer_before = timedelta(minutes=resource.buffer_before_minutes)
    buffer_after = timedelta(minutes=resource.buffer_after_minutes)

    earliest_start = now + timedelta(hours=resource.min_notice_hours)
    latest_start = now + timedelta(days=resource.booking_window_days)

    rules_by_weekday: dict[int, list[WorkingHoursRule]] = defaultdict(list)
    for rule in rules:
        rules_by_weekday[rule.weekday].append(rule)

    seen: set[datetime] = set()
    slots: list[TimeSlot] = []

    for day in iter_days(window_from, window_to):
        open_intervals = resolve_open_intervals(day, rules_by_weekday.get(weekday_index(day), []), exceptions)

        for open_start, open_end in open_intervals:
            interval_start, interval_end = local_interval_to_utc(day, open_start, open_end, tz)

            # start times stay on the granularity grid anchored at the interval start
            cursor = interval_start
            while cursor + duration + buffer_after <= interval_end:
                fits = cursor - buffer_before >= interval_start
                if fits and earliest_start <= cursor <= latest_start and cursor not in seen:
                    blocked = blocking_intervals(
                        cursor - buffer_before,
                        cursor + duration + buffer_after,
                        occupied,
                        resource.concurrent_capacity,
                    )
                    if not blocked:
                        seen.add(cursor)
                        slots.append(TimeSlot(start_t=cursor, end_t=cursor + duration))
                cursor += step

    # overlapping shifts can append out of order
    slots.sort(key=lambda s: s.start_t)

    if limit is not None:
        return slots[:limit]
    return slots
