"""
Hold manager.

A hold is a short-lived exclusive claim on a slot that bridges slot selection
and confirmation. Expiry is lazy: a hold past ``expires_at`` is ignored by every
conflict check whatever its status says, and ``expire_stale_holds`` only tidies
the status column.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from fastapi import Request
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking_engine.core.config import get_settings
from booking_engine.core.errors import ConflictError, NotFoundError, ValidationError
from booking_engine.models.hold import HOLD_ACTIVE, HOLD_EXPIRED, Hold
from booking_engine.services.audit_service import write_audit_log
from booking_engine.services.occupancy_service import ALL_SOURCES, find_conflicts, lock_resource
from booking_engine.services.resource_service import get_active_resource

logger = logging.getLogger(__name__)


def _validate_hold_window(resource, start_t: datetime, end_t: datetime, now: datetime) -> None:
    if start_t.tzinfo is None or end_t.tzinfo is None:
        raise ValidationError("start_t and end_t must include a timezone offset")
    if start_t >= end_t:
        raise ValidationError("Invalid time range")

    if start_t < now + timedelta(hours=resource.min_notice_hours):
        raise ValidationError(
            f"Bookings require at least {resource.min_notice_hours} hours notice",
            code="INSUFFICIENT_NOTICE",
            details={"min_notice_hours": resource.min_notice_hours},
        )

    if start_t > now + timedelta(days=resource.booking_window_days):
        raise ValidationError(
            f"Bookings open at most {resource.booking_window_days} days ahead",
            code="OUTSIDE_BOOKING_WINDOW",
            details={"booking_window_days": resource.booking_window_days},
        )

    if end_t - start_t != timedelta(minutes=resource.duration_minutes):
        raise ValidationError(
            f"Slot length must be {resource.duration_minutes} minutes",
            code="INVALID_DURATION",
            details={"duration_minutes": resource.duration_minutes},
        )


def create_hold(
    db: Session,
    *,
    resource_id: str,
    start_t: datetime,
    end_t: datetime,
    requester_id: str,
    now: datetime | None = None,
    request: Request | None = None,
) -> Hold:
    if now is None:
        now = datetime.now(tz=timezone.utc)

    resource = get_active_resource(db, resource_id)
    _validate_hold_window(resource, start_t, end_t, now)

    # Conflict scan and insert share one transaction behind the resource lock
    lock_resource(db, resource.id)
    conflicts = find_conflicts(db, resource=resource, start_t=start_t, end_t=end_t, now=now, sources=ALL_SOURCES)
    if conflicts:
        db.rollback()
        logger.warning(
            "Hold rejected for resource %s %s-%s: %d conflicting interval(s)",
            resource.id,
            start_t.isoformat(),
            end_t.isoformat(),
            len(conflicts),
        )
        raise ConflictError(
            "Time slot is no longer available",
            details={"sources": sorted({c.source for c in conflicts})},
        )

    settings = get_settings()
    hold = Hold(
        resource_id=resource.id,
        start_t=start_t,
        end_t=end_t,
        created_by=requester_id,
        status=HOLD_ACTIVE,
        expires_at=now + timedelta(minutes=settings.hold_ttl_minutes),
    )
    db.add(hold)

    # The hold and its audit row land in one commit
    try:
        db.flush()
        write_audit_log(
            db,
            actor_id=requester_id,
            action_type="HOLD_CREATE",
            target_type="hold",
            target_id=hold.id,
            summary="Created hold",
            diff_json={"resource_id": resource.id, "start_t": start_t, "end_t": end_t},
            request=request,
            commit=False,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not persist hold on resource %s", resource.id)
        raise
    db.refresh(hold)

    logger.info("Hold %s created on resource %s, expires at %s", hold.id, resource.id, hold.expires_at.isoformat())
    return hold


def get_hold(db: Session, *, hold_id: str, requester_id: str) -> Hold:
    hold = db.get(Hold, hold_id)
    if not hold or hold.created_by != requester_id:
        raise NotFoundError("Hold not found")
    return hold


def release_hold(db: Session, *, hold_id: str, requester_id: str, now: datetime | None = None) -> Hold:
    """Give up an active hold before it expires."""
    hold = db.execute(
        select(Hold).where(Hold.id == hold_id, Hold.created_by == requester_id, Hold.status == HOLD_ACTIVE)
    ).scalar_one_or_none()
    if not hold:
        raise NotFoundError("Hold not found or no longer active")

    hold.status = HOLD_EXPIRED
    if now is None:
        now = datetime.now(tz=timezone.utc)
    if hold.expires_at > now:
        hold.expires_at = now
    db.commit()

    logger.info("Hold %s released by requester", hold.id)
    return hold


def expire_stale_holds(db: Session, *, now: datetime | None = None) -> int:
    if now is None:
        now = datetime.now(tz=timezone.utc)

    result = db.execute(
        update(Hold)
        .where(Hold.status == HOLD_ACTIVE, Hold.expires_at <= now)
        .values(status=HOLD_EXPIRED)
        .execution_options(synchronize_session=False)
    )
    db.commit()

    count = result.rowcount or 0
    if count:
        logger.info("Marked %d stale hold(s) as expired", count)
    return count
