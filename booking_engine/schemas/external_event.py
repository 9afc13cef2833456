from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ExternalEventCreate(BaseModel):
    start_t: datetime
    end_t: datetime
    source: str = Field(default="manual", min_length=1, max_length=64)
    external_id: str | None = Field(default=None, max_length=255)
    summary: str = Field(default="", max_length=255)


class ExternalEventImport(BaseModel):
    source: str = Field(min_length=1, max_length=64)
    events: list[ExternalEventCreate] = Field(min_length=1)


class ExternalEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resource_id: str
    start_t: datetime
    end_t: datetime
    source: str
    external_id: str | None
    summary: str
