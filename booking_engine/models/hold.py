from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from booking_engine.db.base import Base
from booking_engine.models._mixins import TimestampMixin
from booking_engine.models.types import UTCDateTime

HOLD_ACTIVE = "active"
HOLD_CONFIRMED = "confirmed"
HOLD_EXPIRED = "expired"


class Hold(Base, TimestampMixin):
    __tablename__ = "holds"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    resource_id: Mapped[str] = mapped_column(String(36), ForeignKey("resources.id"), nullable=False, index=True)

    start_t: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    end_t: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    created_by: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=HOLD_ACTIVE)  # active/confirmed/expired
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    def is_expired(self, now: datetime) -> bool:
        # status alone is not trusted: expiry is detected lazily
        return self.status == HOLD_EXPIRED or now > self.expires_at
