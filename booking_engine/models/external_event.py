from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from booking_engine.db.base import Base
from booking_engine.models._mixins import TimestampMixin
from booking_engine.models.types import UTCDateTime


class ExternalEvent(Base, TimestampMixin):
    """Calendar block imported from an outside calendar."""

    __tablename__ = "external_events"
    __table_args__ = (UniqueConstraint("resource_id", "source", "external_id", name="uq_external_events_source_ref"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id: Mapped[str] = mapped_column(String(36), ForeignKey("resources.id"), nullable=False, index=True)

    start_t: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    end_t: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    source: Mapped[str] = mapped_column(String(64), nullable=False, default="manual")  # manual/google/ical/...
    external_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    summary: Mapped[str] = mapped_column(String(255), nullable=False, default="")
