from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

RESOURCE_TYPES = ("space", "service", "equipment", "room")


class ResourceBase(BaseModel):
    slot_granularity_minutes: int = Field(default=30, ge=15, le=240)
    duration_minutes: int = Field(default=240, ge=30, le=480)
    min_notice_hours: int = Field(default=24, ge=0, le=168)
    booking_window_days: int = Field(default=180, ge=1, le=365)
    daily_capacity: int = Field(default=1, ge=1, le=100)
    concurrent_capacity: int = Field(default=1, ge=1, le=50)
    buffer_before_minutes: int = Field(default=60, ge=0, le=120)
    buffer_after_minutes: int = Field(default=60, ge=0, le=120)


class ResourceCreate(ResourceBase):
    name: str = Field(min_length=2, max_length=255)
    type: str = Field(default="space", pattern="^(space|service|equipment|room)$")
    is_active: bool = True
    tz: str | None = Field(default=None, max_length=64)


class ResourceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=255)
    type: str | None = Field(default=None, pattern="^(space|service|equipment|room)$")
    slot_granularity_minutes: int | None = Field(default=None, ge=15, le=240)
    duration_minutes: int | None = Field(default=None, ge=30, le=480)
    min_notice_hours: int | None = Field(default=None, ge=0, le=168)
    booking_window_days: int | None = Field(default=None, ge=1, le=365)
    daily_capacity: int | None = Field(default=None, ge=1, le=100)
    concurrent_capacity: int | None = Field(default=None, ge=1, le=50)
    buffer_before_minutes: int | None = Field(default=None, ge=0, le=120)
    buffer_after_minutes: int | None = Field(default=None, ge=0, le=120)
    is_active: bool | None = None
    tz: str | None = Field(default=None, max_length=64)


class ResourceOut(ResourceBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    type: str
    is_active: bool
    tz: str
    created_at: datetime
    updated_at: datetime
