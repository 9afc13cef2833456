from __future__ import annotations

import uuid
from datetime import time

from sqlalchemy import ForeignKey, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booking_engine.db.base import Base
from booking_engine.models._mixins import TimestampMixin


class WorkingHoursRule(Base, TimestampMixin):
    __tablename__ = "resource_working_hours"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id: Mapped[str] = mapped_column(String(36), ForeignKey("resources.id"), nullable=False, index=True)

    # 0 = Sunday ... 6 = Saturday
    weekday: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    # 00:00 means end of day
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    resource: Mapped["Resource"] = relationship("Resource", back_populates="working_hours")
