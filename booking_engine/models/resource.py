from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from booking_engine.db.base import Base
from booking_engine.models._mixins import TimestampMixin


class Resource(Base, TimestampMixin):
    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="space")  # space/service/equipment/room

    # Scheduling (minutes unless noted)
    slot_granularity_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=240)
    min_notice_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    booking_window_days: Mapped[int] = mapped_column(Integer, nullable=False, default=180)
    buffer_before_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    buffer_after_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)

    # daily_capacity is informational only
    daily_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    concurrent_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    tz: Mapped[str] = mapped_column(String(64), nullable=False, default="America/Sao_Paulo")

    working_hours: Mapped[list["WorkingHoursRule"]] = relationship(
        "WorkingHoursRule", back_populates="resource", cascade="all, delete-orphan"
    )
