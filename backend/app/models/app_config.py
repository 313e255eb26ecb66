from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, func
from app.db import Base
from app.models.submission import utcnow

EVENT_CONFIG_KEY = "event"

class AppConfig(Base):
    __tablename__ = "app_config"
    key: Mapped[str] = mapped_column(String(32), primary_key=True, default=EVENT_CONFIG_KEY)
    playlist_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
    )
