from __future__ import annotations

import logging
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import select
from sqlalchemy.orm import Session

from booking_engine.core.config import get_settings
from booking_engine.core.errors import ForbiddenError, NotFoundError, ValidationError
from booking_engine.models.resource import Resource

logger = logging.getLogger(__name__)


def _ensure_timezone(tz: str) -> str:
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {tz}")
    return tz


def get_active_resource(db: Session, resource_id: str) -> Resource:
    resource = db.get(Resource, resource_id)
    if not resource or not resource.is_active:
        raise NotFoundError("Resource not found or inactive")
    return resource


def get_owned_resource(db: Session, resource_id: str, owner_id: str) -> Resource:
    resource = db.get(Resource, resource_id)
    if not resource:
        raise NotFoundError("Resource not found")
    if resource.owner_id != owner_id:
        raise ForbiddenError("Not the owner of this resource")
    return resource


def list_owner_resources(db: Session, owner_id: str) -> list[Resource]:
    return (
        db.execute(select(Resource).where(Resource.owner_id == owner_id).order_by(Resource.created_at.desc()))
        .scalars()
        .all()
    )


def create_resource(db: Session, *, owner_id: str, data: dict[str, Any]) -> Resource:
    data = dict(data)
    data["tz"] = _ensure_timezone(data.get("tz") or get_settings().default_timezone)

    resource = Resource(owner_id=owner_id, **data)
    db.add(resource)
    db.commit()
    db.refresh(resource)

    logger.info("Created resource %s for owner %s", resource.id, owner_id)
    return resource


def update_resource(db: Session, *, resource: Resource, data: dict[str, Any]) -> Resource:
    data = dict(data)
    nulls = sorted(k for k, v in data.items() if v is None and k != "tz")
    if nulls:
        raise ValidationError("Fields cannot be null", details={"fields": nulls})

    if "tz" in data:
        if data["tz"] is None:
            data.pop("tz")
        else:
            _ensure_timezone(data["tz"])

    for k, v in data.items():
        setattr(resource, k, v)
    db.commit()
    db.refresh(resource)
    return resource


def deactivate_resource(db: Session, *, resource: Resource) -> Resource:
    """Hide the resource from availability. Bookings and holds are kept."""
    if not resource.is_active:
        return resource
    resource.is_active = False
    db.commit()
    db.refresh(resource)

    logger.info("Deactivated resource %s", resource.id)
    return resource
