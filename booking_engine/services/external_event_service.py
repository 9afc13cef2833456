from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from booking_engine.core.errors import NotFoundError, ValidationError
from booking_engine.models.external_event import ExternalEvent
from booking_engine.models.resource import Resource

logger = logging.getLogger(__name__)


def _validate_range(start_t: datetime, end_t: datetime) -> None:
    if start_t.tzinfo is None or end_t.tzinfo is None:
        raise ValidationError("start_t and end_t must include a timezone offset")
    if start_t >= end_t:
        raise ValidationError("Invalid time range")


def list_external_events(
    db: Session,
    resource_id: str,
    *,
    from_: datetime | None = None,
    to: datetime | None = None,
) -> list[ExternalEvent]:
    q = select(ExternalEvent).where(ExternalEvent.resource_id == resource_id).order_by(ExternalEvent.start_t)
    if from_:
        q = q.where(ExternalEvent.end_t > from_)
    if to:
        q = q.where(ExternalEvent.start_t < to)
    return db.execute(q.limit(1000)).scalars().all()


def create_external_event(
    db: Session,
    *,
    resource: Resource,
    start_t: datetime,
    end_t: datetime,
    source: str = "manual",
    external_id: str | None = None,
    summary: str = "",
) -> ExternalEvent:
    _validate_range(start_t, end_t)

    event = ExternalEvent(
        resource_id=resource.id,
        start_t=start_t,
        end_t=end_t,
        source=source,
        external_id=external_id,
        summary=summary or "",
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def import_external_events(db: Session, *, resource: Resource, source: str, events: list[dict]) -> dict[str, int]:
    """Upsert a batch of imported calendar blocks.

    Events carrying an ``external_id`` already seen for this resource and
    source are updated in place, the rest are inserted.
    """
    for ev in events:
        _validate_range(ev["start_t"], ev["end_t"])

    existing = {
        e.external_id: e
        for e in db.execute(
            select(ExternalEvent)
            .where(ExternalEvent.resource_id == resource.id)
            .where(ExternalEvent.source == source)
            .where(ExternalEvent.external_id.is_not(None))
        ).scalars()
    }

    created = 0
    updated = 0
    for ev in events:
        ext_id = ev.get("external_id")
        current = existing.get(ext_id) if ext_id else None
        if current is not None:
            current.start_t = ev["start_t"]
            current.end_t = ev["end_t"]
            current.summary = ev.get("summary") or ""
            updated += 1
            continue

        row = ExternalEvent(
            resource_id=resource.id,
            start_t=ev["start_t"],
            end_t=ev["end_t"],
            source=source,
            external_id=ext_id,
            summary=ev.get("summary") or "",
        )
        db.add(row)
        if ext_id:
            existing[ext_id] = row
        created += 1

    db.commit()

    logger.info("Imported external events for resource %s from %s: %d created, %d updated", resource.id, source, created, updated)
    return {"created": created, "updated": updated}


def delete_external_event(db: Session, *, resource: Resource, event_id: str) -> None:
    event = db.get(ExternalEvent, event_id)
    if not event or event.resource_id != resource.id:
        raise NotFoundError("External event not found")
    db.delete(event)
    db.commit()
