from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from booking_engine.core.deps import get_current_requester, get_db
from booking_engine.models.resource import Resource
from booking_engine.schemas.hold import HoldCreate, HoldCreated, HoldOut
from booking_engine.services.hold_service import create_hold, get_hold, release_hold

router = APIRouter()


def _hold_out(hold) -> HoldOut:
    return HoldOut(
        id=hold.id,
        resource_id=hold.resource_id,
        start_t=hold.start_t,
        end_t=hold.end_t,
        status=hold.status,
        expires_at=hold.expires_at,
        is_expired=hold.is_expired(datetime.now(tz=timezone.utc)),
    )


@router.post("", response_model=HoldCreated)
def create(
    payload: HoldCreate,
    request: Request,
    db: Session = Depends(get_db),
    requester_id: str = Depends(get_current_requester),
):
    hold = create_hold(
        db,
        resource_id=payload.resource_id,
        start_t=payload.start_t,
        end_t=payload.end_t,
        requester_id=requester_id,
        request=request,
    )
    resource = db.get(Resource, hold.resource_id)
    return HoldCreated(
        hold_id=hold.id,
        expires_at=hold.expires_at,
        resource_name=resource.name,
        start_t=hold.start_t,
        end_t=hold.end_t,
    )


@router.get("/{hold_id}", response_model=HoldOut)
def read(hold_id: str, db: Session = Depends(get_db), requester_id: str = Depends(get_current_requester)):
    return _hold_out(get_hold(db, hold_id=hold_id, requester_id=requester_id))


@router.delete("/{hold_id}", response_model=HoldOut)
def release(hold_id: str, db: Session = Depends(get_db), requester_id: str = Depends(get_current_requester)):
    return _hold_out(release_hold(db, hold_id=hold_id, requester_id=requester_id))
