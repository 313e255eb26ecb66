"""
Wire contracts of the two generative-AI functions.

Field aliases are the camelCase names the prompts and the model outputs use;
Python code works with the snake_case attributes.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CurrentSubmission(_CamelModel):
    player_id: str = Field(min_length=1)
    game_name: str = Field(min_length=1)
    score_value: int = Field(ge=0)
    image_url: str | None = Field(default=None, alias="imageURL")
    timestamp: str  # ISO-8601


class PlayerContext(_CamelModel):
    name: str = Field(min_length=1)
    instagram: str | None = None


class PreviousScore(_CamelModel):
    score_value: int = Field(ge=0)
    timestamp: str


class FraudCheckRequest(_CamelModel):
    current_submission: CurrentSubmission
    player_context: PlayerContext
    # chronologically ascending, no identifiers
    previous_scores_by_player_for_game: list[PreviousScore] = Field(default_factory=list)


class FraudAssessment(_CamelModel):
    is_suspicious: bool
    reason: str
    confidence: float = Field(ge=0, le=100)
    suggested_action: str


class ImageVerificationRequest(_CamelModel):
    photo_data_uri: str
    entered_score: int = Field(ge=0)
    game_name: str


class VerificationVerdict(_CamelModel):
    is_verified: bool
    image_detected_score: int | None = None
    discrepancy_reason: str
    confidence: float = Field(ge=0, le=1)
