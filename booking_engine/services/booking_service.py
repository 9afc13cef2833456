"""
Booking confirmation.

Turns an unexpired hold into a durable booking. The booking row is the source
of truth for later conflict checks, so it is committed first and the hold
status flip afterwards is best effort.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking_engine.core.errors import ConflictError, ExpiredError, NotFoundError, ValidationError
from booking_engine.models.booking import (
    BOOKING_CANCELLED,
    BOOKING_CONFIRMED,
    BOOKING_PENDING,
    PAYMENT_FAILED,
    PAYMENT_PAID,
    PAYMENT_PENDING,
    PAYMENT_REFUNDED,
    Booking,
)
from booking_engine.models.hold import HOLD_ACTIVE, HOLD_CONFIRMED, HOLD_EXPIRED, Hold
from booking_engine.models.resource import Resource
from booking_engine.services.audit_service import write_audit_log
from booking_engine.services.occupancy_service import SOURCE_BOOKING, SOURCE_EXTERNAL, find_conflicts, lock_resource

logger = logging.getLogger(__name__)

PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_PAID, PAYMENT_FAILED, PAYMENT_REFUNDED)


def confirm_booking(
    db: Session,
    *,
    hold_id: str,
    requester_id: str,
    customer_name: str,
    customer_email: str,
    customer_phone: str | None = None,
    notes: str | None = None,
    total_amount: Decimal | None = None,
    now: datetime | None = None,
    request: Request | None = None,
) -> tuple[Booking, Resource]:
    if not customer_name or not customer_email:
        raise ValidationError("customer_name and customer_email are required")

    if now is None:
        now = datetime.now(tz=timezone.utc)

    hold = db.execute(
        select(Hold).where(Hold.id == hold_id, Hold.created_by == requester_id, Hold.status == HOLD_ACTIVE)
    ).scalar_one_or_none()
    if not hold:
        raise NotFoundError("Hold not found or no longer active")

    if now > hold.expires_at:
        hold.status = HOLD_EXPIRED
        db.commit()
        logger.warning("Confirmation attempted on expired hold %s", hold.id)
        raise ExpiredError("Hold expired. Select a new time slot.")

    resource = lock_resource(db, hold.resource_id)
    if resource is None:
        db.rollback()
        raise NotFoundError("Resource not found")

    # Committed bookings are what a faster confirmer would have left behind
    conflicts = find_conflicts(
        db,
        resource=resource,
        start_t=hold.start_t,
        end_t=hold.end_t,
        now=now,
        sources=(SOURCE_BOOKING, SOURCE_EXTERNAL),
    )
    if conflicts:
        db.rollback()
        logger.warning("Confirmation of hold %s rejected: slot taken", hold_id)
        raise ConflictError(
            "Time slot is no longer available",
            details={"sources": sorted({c.source for c in conflicts})},
        )

    booking = Booking(
        resource_id=hold.resource_id,
        hold_id=hold.id,
        start_t=hold.start_t,
        end_t=hold.end_t,
        created_by=requester_id,
        status=BOOKING_PENDING,
        customer_name=customer_name,
        customer_email=customer_email,
        customer_phone=customer_phone,
        notes=notes,
        total_amount=total_amount,
        payment_status=PAYMENT_PENDING if total_amount else PAYMENT_PAID,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)

    try:
        hold.status = HOLD_CONFIRMED
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Booking %s committed but hold %s could not be marked confirmed", booking.id, hold_id, exc_info=True)

    logger.info("Booking %s confirmed from hold %s", booking.id, hold_id)

    write_audit_log(
        db,
        actor_id=requester_id,
        action_type="BOOKING_CONFIRM",
        target_type="booking",
        target_id=booking.id,
        summary="Confirmed booking from hold",
        diff_json={"hold_id": hold_id, "resource_id": booking.resource_id, "customer_email": customer_email},
        request=request,
    )
    return booking, resource


def get_booking(db: Session, *, booking_id: str, requester_id: str) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking or booking.created_by != requester_id:
        raise NotFoundError("Booking not found")
    return booking


def list_my_bookings(db: Session, *, requester_id: str) -> list[Booking]:
    return (
        db.execute(select(Booking).where(Booking.created_by == requester_id).order_by(Booking.start_t.desc()))
        .scalars()
        .all()
    )


def cancel_booking(db: Session, *, booking: Booking, reason: str = "", now: datetime | None = None) -> Booking:
    if booking.status == BOOKING_CANCELLED:
        return booking
    booking.status = BOOKING_CANCELLED
    booking.cancel_reason = (reason or "")[:255]
    booking.cancelled_at = now or datetime.now(tz=timezone.utc)
    db.commit()

    logger.info("Booking %s cancelled", booking.id)
    return booking


def update_payment_status(db: Session, *, booking_id: str, payment_status: str, now: datetime | None = None) -> Booking:
    """Apply a payment outcome reported by the payment collaborator.

    ``paid`` confirms a pending booking, ``failed`` releases the slot.
    """
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError(f"Unknown payment status: {payment_status}")

    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")

    booking.payment_status = payment_status
    if payment_status == PAYMENT_PAID and booking.status == BOOKING_PENDING:
        booking.status = BOOKING_CONFIRMED
    elif payment_status == PAYMENT_FAILED and booking.status != BOOKING_CANCELLED:
        booking.status = BOOKING_CANCELLED
        booking.cancel_reason = "PAYMENT_FAILED"
        booking.cancelled_at = now or datetime.now(tz=timezone.utc)
    db.commit()

    logger.info("Booking %s payment status -> %s (status %s)", booking.id, payment_status, booking.status)

    write_audit_log(
        db,
        actor_id=None,
        action_type="BOOKING_PAYMENT_STATUS",
        target_type="booking",
        target_id=booking.id,
        summary=f"Payment status set to {payment_status}",
        diff_json={"payment_status": payment_status, "status": booking.status},
    )
    return booking
