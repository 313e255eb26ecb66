from __future__ import annotations
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field


class RankedScore(BaseModel):
    id: UUID
    score_value: int
    status: str
    submitted_at: datetime
    image_url: str | None = None


class PlayerRanking(BaseModel):
    rank: int
    player_id: UUID
    player_name: str
    player_instagram: str | None = None
    best: RankedScore
    # remaining submissions, highest first
    others: list[RankedScore] = Field(default_factory=list)


class GameLeaderboard(BaseModel):
    game_id: UUID
    game_name: str
    players: list[PlayerRanking]


class TopScore(BaseModel):
    rank: int
    id: UUID
    player_id: UUID
    player_name: str
    game_id: UUID
    game_name: str
    score_value: int
    status: str
    submitted_at: datetime
