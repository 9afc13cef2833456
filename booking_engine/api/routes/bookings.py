from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from booking_engine.core.deps import get_current_requester, get_db, require_payment_collaborator
from booking_engine.schemas.booking import (
    BookingCancelRequest,
    BookingConfirm,
    BookingConfirmed,
    BookingOut,
    PaymentStatusUpdate,
)
from booking_engine.services.audit_service import write_audit_log
from booking_engine.services.booking_service import (
    cancel_booking,
    confirm_booking,
    get_booking,
    list_my_bookings,
    update_payment_status,
)

router = APIRouter()


@router.post("/confirm", response_model=BookingConfirmed)
def confirm(
    payload: BookingConfirm,
    request: Request,
    db: Session = Depends(get_db),
    requester_id: str = Depends(get_current_requester),
):
    booking, resource = confirm_booking(
        db,
        hold_id=payload.hold_id,
        requester_id=requester_id,
        customer_name=payload.customer_name,
        customer_email=str(payload.customer_email),
        customer_phone=payload.customer_phone,
        notes=payload.notes,
        total_amount=payload.total_amount,
        request=request,
    )
    return BookingConfirmed(
        booking_id=booking.id,
        status=booking.status,
        payment_status=booking.payment_status,
        resource_name=resource.name,
        resource_type=resource.type,
        start_t=booking.start_t,
        end_t=booking.end_t,
        customer_name=booking.customer_name,
        total_amount=booking.total_amount,
    )


@router.get("", response_model=list[BookingOut])
def list_mine(db: Session = Depends(get_db), requester_id: str = Depends(get_current_requester)):
    return list_my_bookings(db, requester_id=requester_id)


@router.get("/{booking_id}", response_model=BookingOut)
def read(booking_id: str, db: Session = Depends(get_db), requester_id: str = Depends(get_current_requester)):
    return get_booking(db, booking_id=booking_id, requester_id=requester_id)


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel(
    booking_id: str,
    payload: BookingCancelRequest,
    request: Request,
    db: Session = Depends(get_db),
    requester_id: str = Depends(get_current_requester),
):
    booking = get_booking(db, booking_id=booking_id, requester_id=requester_id)
    booking = cancel_booking(db, booking=booking, reason=payload.reason)

    write_audit_log(
        db,
        actor_id=requester_id,
        action_type="BOOKING_CANCEL",
        target_type="booking",
        target_id=booking.id,
        summary="Booking cancelled by requester",
        diff_json={"reason": payload.reason},
        request=request,
    )
    return booking


@router.post("/{booking_id}/payment-status", response_model=BookingOut, dependencies=[Depends(require_payment_collaborator)])
def payment_status(booking_id: str, payload: PaymentStatusUpdate, db: Session = Depends(get_db)):
    return update_payment_status(db, booking_id=booking_id, payment_status=payload.payment_status)
