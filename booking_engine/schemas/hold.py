from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class HoldCreate(BaseModel):
    resource_id: str = Field(min_length=1)
    start_t: datetime
    end_t: datetime


class HoldCreated(BaseModel):
    hold_id: str
    expires_at: datetime
    resource_name: str
    start_t: datetime
    end_t: datetime


class HoldOut(BaseModel):
    id: str
    resource_id: str
    start_t: datetime
    end_t: datetime
    status: str
    expires_at: datetime
    is_expired: bool
