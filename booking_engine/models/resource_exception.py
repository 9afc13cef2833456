from __future__ import annotations

import uuid
from datetime import date, time

from sqlalchemy import Date, ForeignKey, String, Time
from sqlalchemy.orm import Mapped, mapped_column

from booking_engine.db.base import Base
from booking_engine.models._mixins import TimestampMixin

EXCEPTION_CLOSED = "closed"
EXCEPTION_OPEN = "open"


class ResourceException(Base, TimestampMixin):
    __tablename__ = "resource_exceptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id: Mapped[str] = mapped_column(String(36), ForeignKey("resources.id"), nullable=False, index=True)

    # Inclusive, resource-local dates
    date_from: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    date_to: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    kind: Mapped[str] = mapped_column(String(16), nullable=False)  # closed/open

    # Only for kind=open
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    def covers(self, day: date) -> bool:
        return self.date_from <= day <= self.date_to
