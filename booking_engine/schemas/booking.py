from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class BookingConfirm(BaseModel):
    hold_id: str = Field(min_length=1)
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: EmailStr
    customer_phone: str | None = Field(default=None, max_length=32)
    notes: str | None = Field(default=None, max_length=2000)
    total_amount: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class BookingConfirmed(BaseModel):
    booking_id: str
    status: str
    payment_status: str
    resource_name: str
    resource_type: str
    start_t: datetime
    end_t: datetime
    customer_name: str
    total_amount: Decimal | None


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resource_id: str
    hold_id: str | None
    start_t: datetime
    end_t: datetime
    status: str
    payment_status: str
    customer_name: str
    customer_email: str
    customer_phone: str | None
    notes: str | None
    total_amount: Decimal | None
    created_at: datetime


class BookingCancelRequest(BaseModel):
    reason: str = Field(default="", max_length=255)


class PaymentStatusUpdate(BaseModel):
    payment_status: str = Field(pattern="^(pending|paid|failed|refunded)$")
