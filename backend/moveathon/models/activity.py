from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Float, Integer, Boolean, DateTime, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID
from moveathon.db import Base


class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    strava_id: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)

    name: Mapped[str | None] = mapped_column(Text())
    type: Mapped[str] = mapped_column(String(32), nullable=False)              # tracker sport type, e.g. 'Run'
    derived_type: Mapped[str | None] = mapped_column(String(32))               # 'Reclassified-Walk' once set, sticky
    distance: Mapped[float] = mapped_column(Float, nullable=False, default=0)  # meters
    moving_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # seconds
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)
    strava_url: Mapped[str | None] = mapped_column(Text())
    manual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_valid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_valid_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
