from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Boolean, String, Text, DateTime, Uuid, JSON, func
from app.db import Base
from app.models.submission import utcnow

class Offer(Base):
    __tablename__ = "offers"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    reward_type: Mapped[str] = mapped_column(String(16), nullable=False)     # food|discount|bonus_time
    value: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    trigger_type: Mapped[str] = mapped_column(String(16), nullable=False)    # random_drop|highscore|scheduled|streak

    # One-time window
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Recurring weekly window, "HH:MM" wall clock in the event timezone
    days_of_week: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    recurring_start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    recurring_end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
