from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from booking_engine.core.deps import get_current_requester, get_db
from booking_engine.schemas.calendar import (
    ExceptionCreate,
    ExceptionOut,
    WorkingHoursIn,
    WorkingHoursOut,
    WorkingHoursReplace,
)
from booking_engine.schemas.resource import ResourceCreate, ResourceOut, ResourceUpdate
from booking_engine.services.audit_service import write_audit_log
from booking_engine.services.calendar_service import (
    add_working_hours,
    create_exception,
    delete_exception,
    delete_working_hours,
    list_exceptions,
    list_working_hours,
    replace_working_hours,
)
from booking_engine.services.resource_service import (
    create_resource,
    deactivate_resource,
    get_owned_resource,
    list_owner_resources,
    update_resource,
)

router = APIRouter()


@router.get("", response_model=list[ResourceOut])
def list_resources(db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    return list_owner_resources(db, owner_id)


@router.post("", response_model=ResourceOut)
def create(payload: ResourceCreate, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = create_resource(db, owner_id=owner_id, data=payload.model_dump())

    write_audit_log(db, actor_id=owner_id, action_type="RESOURCE_CREATE", target_type="resource", target_id=r.id, summary="Created resource", request=request)
    return r


@router.get("/{resource_id}", response_model=ResourceOut)
def read(resource_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    return get_owned_resource(db, resource_id, owner_id)


@router.patch("/{resource_id}", response_model=ResourceOut)
def update(resource_id: str, payload: ResourceUpdate, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    data = payload.model_dump(exclude_unset=True)
    r = update_resource(db, resource=r, data=data)

    write_audit_log(db, actor_id=owner_id, action_type="RESOURCE_UPDATE", target_type="resource", target_id=r.id, summary="Updated resource", diff_json={"keys": sorted(data.keys())}, request=request)
    return r


@router.post("/{resource_id}/deactivate", response_model=ResourceOut)
def deactivate(resource_id: str, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = deactivate_resource(db, resource=get_owned_resource(db, resource_id, owner_id))

    write_audit_log(db, actor_id=owner_id, action_type="RESOURCE_DEACTIVATE", target_type="resource", target_id=r.id, summary="Deactivated resource", request=request)
    return r


# Working hours


@router.get("/{resource_id}/working-hours", response_model=list[WorkingHoursOut])
def get_working_hours(resource_id: str, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    return list_working_hours(db, r.id)


@router.put("/{resource_id}/working-hours", response_model=list[WorkingHoursOut])
def put_working_hours(resource_id: str, payload: WorkingHoursReplace, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    rules = replace_working_hours(db, resource=r, rules=[rule.model_dump() for rule in payload.rules])

    write_audit_log(db, actor_id=owner_id, action_type="WORKING_HOURS_REPLACE", target_type="resource", target_id=r.id, summary="Replaced working hours", diff_json={"count": len(rules)}, request=request)
    return rules


@router.post("/{resource_id}/working-hours", response_model=WorkingHoursOut)
def post_working_hours(resource_id: str, payload: WorkingHoursIn, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    rule = add_working_hours(db, resource=r, weekday=payload.weekday, start_time=payload.start_time, end_time=payload.end_time)

    write_audit_log(db, actor_id=owner_id, action_type="WORKING_HOURS_ADD", target_type="working_hours", target_id=rule.id, summary="Added working hours", request=request)
    return rule


@router.delete("/{resource_id}/working-hours/{rule_id}")
def remove_working_hours(resource_id: str, rule_id: str, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    delete_working_hours(db, resource=r, rule_id=rule_id)

    write_audit_log(db, actor_id=owner_id, action_type="WORKING_HOURS_DELETE", target_type="working_hours", target_id=rule_id, summary="Deleted working hours", request=request)
    return {"ok": True}


# Exceptions


@router.get("/{resource_id}/exceptions", response_model=list[ExceptionOut])
def get_exceptions(
    resource_id: str,
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_requester),
):
    r = get_owned_resource(db, resource_id, owner_id)
    return list_exceptions(db, r.id, date_from=date_from, date_to=date_to)


@router.post("/{resource_id}/exceptions", response_model=ExceptionOut)
def post_exception(resource_id: str, payload: ExceptionCreate, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    exc = create_exception(db, resource=r, **payload.model_dump())

    write_audit_log(
        db,
        actor_id=owner_id,
        action_type="EXCEPTION_CREATE",
        target_type="exception",
        target_id=exc.id,
        summary="Created calendar exception",
        diff_json={"kind": exc.kind, "from": str(exc.date_from), "to": str(exc.date_to)},
        request=request,
    )
    return exc


@router.delete("/{resource_id}/exceptions/{exception_id}")
def remove_exception(resource_id: str, exception_id: str, request: Request, db: Session = Depends(get_db), owner_id: str = Depends(get_current_requester)):
    r = get_owned_resource(db, resource_id, owner_id)
    delete_exception(db, resource=r, exception_id=exception_id)

    write_audit_log(db, actor_id=owner_id, action_type="EXCEPTION_DELETE", target_type="exception", target_id=exception_id, summary="Deleted calendar exception", request=request)
    return {"ok": True}
