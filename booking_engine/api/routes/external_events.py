from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from booking_engine.core.deps import get_current_requester, get_db
from booking_engine.schemas.external_event import ExternalEventCreate, ExternalEventImport, ExternalEventOut
from booking_engine.services.audit_service import write_audit_log
from booking_engine.services.external_event_service import (
    create_external_event,
    delete_external_event,
    import_external_events,
    list_external_events,
)
from booking_engine.services.resource_service import get_owned_resource

router = APIRouter()


@router.get("", response_model=list[ExternalEventOut])
def list_events(
    resource_id: str,
    from_: datetime | None = Query(default=None, alias="from"),
    to: datetime | None = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_requester),
):
    r = get_owned_resource(db, resource_id, owner_id)
    return list_external_events(db, r.id, from_=from_, to=to)


@router.post("", response_model=ExternalEventOut)
def create_event(resource_id: str, payload: ExternalEventCreate, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    ev = create_external_event(db, resource=r, **payload.model_dump())

    write_audit_log(db, actor_id=owner_id, action_type="EXTERNAL_EVENT_CREATE", target_type="external_event", target_id=ev.id, summary="Created external event", request=request)
    return ev


@router.post("/import")
def import_events(resource_id: str, payload: ExternalEventImport, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    counts = import_external_events(db, resource=r, source=payload.source, events=[e.model_dump() for e in payload.events])

    write_audit_log(
        db,
        actor_id=owner_id,
        action_type="EXTERNAL_EVENT_IMPORT",
        target_type="resource",
        target_id=r.id,
        summary="Imported external events",
        diff_json={"source": payload.source, **counts},
        request=request,
    )
    return {"ok": True, **counts}


@router.delete("/{event_id}")
def delete_event(resource_id: str, event_id: str, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    delete_external_event(db, resource=r, event_id=event_id)

    write_audit_log(db, actor_id=owner_id, action_type="EXTERNAL_EVENT_DELETE", target_type="external_event", target_id=event_id, summary="Deleted external event", request=request)
    return {"ok": True}
