from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, DateTime, Uuid, func
from app.db import Base
from app.models.submission import utcnow

class Player(Base):
    __tablename__ = "players"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(80), unique=True, index=True, nullable=False)
    instagram: Mapped[str | None] = mapped_column(String(80), nullable=True)
    group_size: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    owner_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, index=True, nullable=True)  # account that registered the player
    event_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, index=True, nullable=True)
    event_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
