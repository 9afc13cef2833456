from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from booking_engine.core.config import get_settings
from booking_engine.core.errors import ValidationError
from booking_engine.services.calendar_service import list_exceptions, list_working_hours
from booking_engine.services.occupancy_service import load_occupied_intervals
from booking_engine.services.resource_service import get_active_resource
from booking_engine.services.slot_generator import generate_slots

logger = logging.getLogger(__name__)


def get_availability(
    db: Session,
    *,
    resource_id: str,
    date_from: date,
    date_to: date,
    duration_minutes: int | None = None,
    now: datetime | None = None,
) -> dict:
    """Bookable slots of an active resource between two local dates.

    ``duration_minutes`` only changes the length of the slots listed here.
    Holds must still match the resource's own duration, which is what
    ``resource_info`` reports.
    """
    settings = get_settings()

    if date_from > date_to:
        raise ValidationError("'from' must not be after 'to'")
    if (date_to - date_from).days >= settings.availability_max_days:
        raise ValidationError(f"Query window may span at most {settings.availability_max_days} days")
    if duration_minutes is not None and duration_minutes <= 0:
        raise ValidationError("duration_minutes must be positive")

    if now is None:
        now = datetime.now(tz=timezone.utc)

    resource = get_active_resource(db, resource_id)
    tz = ZoneInfo(resource.tz)

    rules = list_working_hours(db, resource.id)
    exceptions = list_exceptions(db, resource.id, date_from=date_from, date_to=date_to)

    # Preload everything touching the window, buffers and overnight shifts included
    margin = timedelta(minutes=resource.buffer_before_minutes + resource.buffer_after_minutes)
    range_start = datetime.combine(date_from, time.min, tzinfo=tz).astimezone(timezone.utc) - margin
    range_end = datetime.combine(date_to + timedelta(days=2), time.min, tzinfo=tz).astimezone(timezone.utc) + margin
    occupied = load_occupied_intervals(
        db,
        resource_id=resource.id,
        window_start=range_start,
        window_end=range_end,
        now=now,
    )

    slots = generate_slots(
        resource,
        rules,
        exceptions,
        occupied,
        date_from,
        date_to,
        now=now,
        duration_minutes=duration_minutes,
        limit=settings.availability_max_slots,
    )

    logger.info(
        "Availability for resource %s from %s to %s: %d occupied, %d slots",
        resource.id,
        date_from,
        date_to,
        len(occupied),
        len(slots),
    )

    return {
        "slots": [{"start_t": s.start_t, "end_t": s.end_t} for s in slots],
        "resource_info": {
            "id": resource.id,
            "name": resource.name,
            "type": resource.type,
            "duration_minutes": resource.duration_minutes,
            "slot_granularity_minutes": resource.slot_granularity_minutes,
            "timezone": resource.tz,
        },
    }
