from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class TimeSlotOut(BaseModel):
    start_t: datetime
    end_t: datetime


class ResourceInfo(BaseModel):
    id: str
    name: str
    type: str
    duration_minutes: int
    slot_granularity_minutes: int
    timezone: str


class AvailabilityResponse(BaseModel):
    slots: list[TimeSlotOut]
    resource_info: ResourceInfo
