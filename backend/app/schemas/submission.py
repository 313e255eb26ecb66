from __future__ import annotations
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime

ScoreStatus = Literal["pending", "approved", "rejected"]
ScoreSortKey = Literal["submitted_at", "score_value", "game_name", "event_name", "player_name", "status"]
SortDirection = Literal["asc", "desc"]


class ScorePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    player_id: UUID
    player_name: str
    player_instagram: str | None = None
    game_id: UUID
    game_name: str
    event_id: UUID | None = None
    event_name: str | None = None
    score_value: int
    # 🔒 storage keys stay server-side; only the public URL is exposed
    image_url: str | None = None
    status: ScoreStatus
    submitted_at: datetime
    is_suspicious: bool | None = None
    suspicion_reason: str | None = None
    fraud_confidence: int | None = None
    suggested_action: str | None = None


class ScoreStatusUpdate(BaseModel):
    status: ScoreStatus


class ScoreValueUpdate(BaseModel):
    score_value: int = Field(ge=0)
