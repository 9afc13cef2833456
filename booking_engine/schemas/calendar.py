from __future__ import annotations

from datetime import date, time

from pydantic import BaseModel, ConfigDict, Field


class WorkingHoursIn(BaseModel):
    weekday: int = Field(ge=0, le=6)  # 0 = Sunday
    start_time: time
    end_time: time


class WorkingHoursReplace(BaseModel):
    rules: list[WorkingHoursIn] = Field(default_factory=list)


class WorkingHoursOut(WorkingHoursIn):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resource_id: str


class ExceptionCreate(BaseModel):
    date_from: date
    date_to: date
    kind: str = Field(pattern="^(closed|open)$")
    start_time: time | None = None
    end_time: time | None = None
    reason: str = Field(default="", max_length=255)


class ExceptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resource_id: str
    date_from: date
    date_to: date
    kind: str
    start_time: time | None
    end_time: time | None
    reason: str
