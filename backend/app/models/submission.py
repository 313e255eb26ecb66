from __future__ import annotations
import uuid
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Boolean, Integer, String, Text, DateTime, Uuid, Index, func
from app.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScoreSubmission(Base):
    __tablename__ = "score_submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # No foreign keys: deleting a player or game leaves its scores in place
    player_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    player_name: Mapped[str] = mapped_column(String(80), nullable=False)
    player_instagram: Mapped[str | None] = mapped_column(String(80), nullable=True)

    game_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True, nullable=False)
    game_name: Mapped[str] = mapped_column(String(120), nullable=False)

    event_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, index=True, nullable=True)
    event_name: Mapped[str | None] = mapped_column(String(120), nullable=True)

    score_value: Mapped[int] = mapped_column(Integer, nullable=False)

    image_key: Mapped[str | None] = mapped_column(Text(), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text(), nullable=True)
    image_mime: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # pending|approved|rejected
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    # Filled in by the fraud check job
    is_suspicious: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    suspicion_reason: Mapped[str | None] = mapped_column(Text(), nullable=True)
    fraud_confidence: Mapped[int | None] = mapped_column(Integer, nullable=True)
    suggested_action: Mapped[str | None] = mapped_column(String(120), nullable=True)

    __table_args__ = (
        Index("ix_score_submissions_player_game", "player_id", "game_id", "submitted_at"),
    )
