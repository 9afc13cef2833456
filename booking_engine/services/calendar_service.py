from __future__ import annotations

import logging
from datetime import date, time
from typing import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from booking_engine.core.errors import NotFoundError, ValidationError
from booking_engine.models.resource import Resource
from booking_engine.models.resource_exception import EXCEPTION_CLOSED, EXCEPTION_OPEN, ResourceException
from booking_engine.models.working_hours import WorkingHoursRule

logger = logging.getLogger(__name__)

MIDNIGHT = time(0, 0)


def weekday_index(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


def _validate_time_range(start: time, end: time) -> None:
    if end != MIDNIGHT and start >= end:
        raise ValidationError("start_time must be before end_time")


def resolve_open_intervals(
    day: date,
    weekday_rules: Sequence[WorkingHoursRule],
    exceptions: Iterable[ResourceException],
) -> list[tuple[time, time]]:
    """Effective open intervals (resource-local) for ``day``.

    A closed exception wins over everything, an open exception replaces the
    weekday's rules, otherwise every rule for the weekday applies.
    """
    covering = [exc for exc in exceptions if exc.covers(day)]

    if any(exc.kind == EXCEPTION_CLOSED for exc in covering):
        return []

    open_exc = next(
        (exc for exc in covering if exc.kind == EXCEPTION_OPEN and exc.start_time is not None and exc.end_time is not None),
        None,
    )
    if open_exc is not None:
        return [(open_exc.start_time, open_exc.end_time)]

    weekday = weekday_index(day)
    return [(r.start_time, r.end_time) for r in weekday_rules if r.weekday == weekday]


# Working hours


def list_working_hours(db: Session, resource_id: str) -> list[WorkingHoursRule]:
    return (
        db.execute(
            select(WorkingHoursRule)
            .where(WorkingHoursRule.resource_id == resource_id)
            .order_by(WorkingHoursRule.weekday, WorkingHoursRule.start_time)
        )
        .scalars()
        .all()
    )


def add_working_hours(db: Session, *, resource: Resource, weekday: int, start_time: time, end_time: time) -> WorkingHoursRule:
    if not 0 <= weekday <= 6:
        raise ValidationError("weekday must be between 0 (Sunday) and 6 (Saturday)")
    _validate_time_range(start_time, end_time)

    rule = WorkingHoursRule(resource_id=resource.id, weekday=weekday, start_time=start_time, end_time=end_time)
    db.add(rule)
    db.commit()
    db.refresh(rule)
    return rule


def replace_working_hours(db: Session, *, resource: Resource, rules: list[dict]) -> list[WorkingHoursRule]:
    """Replace the whole weekly schedule of a resource in one transaction."""
    for r in rules:
        if not 0 <= r["weekday"] <= 6:
            raise ValidationError("weekday must be between 0 (Sunday) and 6 (Saturday)")
        _validate_time_range(r["start_time"], r["end_time"])

    db.execute(delete(WorkingHoursRule).where(WorkingHoursRule.resource_id == resource.id))
    for r in rules:
        db.add(WorkingHoursRule(resource_id=resource.id, weekday=r["weekday"], start_time=r["start_time"], end_time=r["end_time"]))
    db.commit()

    logger.info("Replaced working hours for resource %s (%d rules)", resource.id, len(rules))
    return list_working_hours(db, resource.id)


def delete_working_hours(db: Session, *, resource: Resource, rule_id: str) -> None:
    rule = db.get(WorkingHoursRule, rule_id)
    if not rule or rule.resource_id != resource.id:
        raise NotFoundError("Working hours rule not found")
    db.delete(rule)
    db.commit()


# Exceptions


def list_exceptions(
    db: Session,
    resource_id: str,
    *,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[ResourceException]:
    q = select(ResourceException).where(ResourceException.resource_id == resource_id)
    if date_to is not None:
        q = q.where(ResourceException.date_from <= date_to)
    if date_from is not None:
        q = q.where(ResourceException.date_to >= date_from)
    return db.execute(q.order_by(ResourceException.date_from)).scalars().all()


def create_exception(
    db: Session,
    *,
    resource: Resource,
    date_from: date,
    date_to: date,
    kind: str,
    start_time: time | None = None,
    end_time: time | None = None,
    reason: str = "",
) -> ResourceException:
    if date_from > date_to:
        raise ValidationError("Invalid date range")
    if kind not in (EXCEPTION_CLOSED, EXCEPTION_OPEN):
        raise ValidationError("kind must be 'closed' or 'open'")

    if kind == EXCEPTION_OPEN:
        if start_time is None or end_time is None:
            raise ValidationError("Open exceptions require start_time and end_time")
        _validate_time_range(start_time, end_time)
    else:
        start_time = end_time = None

    exc = ResourceException(
        resource_id=resource.id,
        date_from=date_from,
        date_to=date_to,
        kind=kind,
        start_time=start_time,
        end_time=end_time,
        reason=reason or "",
    )
    db.add(exc)
    db.commit()
    db.refresh(exc)
    return exc


def delete_exception(db: Session, *, resource: Resource, exception_id: str) -> None:
    exc = db.get(ResourceException, exception_id)
    if not exc or exc.resource_id != resource.id:
        raise NotFoundError("Exception not found")
    db.delete(exc)
    db.commit()
