from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from booking_engine.core.deps import get_db
from booking_engine.schemas.availability import AvailabilityResponse
from booking_engine.services.availability_service import get_availability

router = APIRouter()


@router.get("", response_model=AvailabilityResponse)
def availability(
    resource_id: str,
    from_: date = Query(alias="from"),
    to: date = Query(),
    duration_minutes: int | None = Query(default=None, ge=1, le=1440),
    db: Session = Depends(get_db),
):
    return get_availability(
        db,
        resource_id=resource_id,
        date_from=from_,
        date_to=to,
        duration_minutes=duration_minutes,
    )
