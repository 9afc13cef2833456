from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from booking_engine.db.base import Base
from booking_engine.models._mixins import TimestampMixin
from booking_engine.models.types import UTCDateTime

BOOKING_PENDING = "pending"
BOOKING_CONFIRMED = "confirmed"
BOOKING_CANCELLED = "cancelled"

# Statuses that occupy the resource
BOOKING_OCCUPYING_STATUSES = (BOOKING_PENDING, BOOKING_CONFIRMED)

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"
PAYMENT_REFUNDED = "refunded"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id: Mapped[str] = mapped_column(String(36), ForeignKey("resources.id"), nullable=False, index=True)
    hold_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("holds.id"), nullable=True, index=True)

    start_t: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    end_t: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    created_by: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=BOOKING_PENDING)  # pending/confirmed/cancelled

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    total_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default=PAYMENT_PENDING)  # pending/paid/failed/refunded

    cancelled_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    cancel_reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")
