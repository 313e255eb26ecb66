from __future__ import annotations
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_handle(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip().lstrip("@")
    return v or None


class PlayerCreate(BaseModel):
    name: str = Field(min_length=2, max_length=80)
    instagram: str | None = Field(default=None, max_length=80)
    group_size: int = Field(ge=1, le=100)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("instagram")
    @classmethod
    def clean_instagram(cls, v: str | None):
        return _clean_handle(v)


class PlayerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=80)
    instagram: str | None = Field(default=None, max_length=80)
    group_size: int | None = Field(default=None, ge=1, le=100)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("instagram")
    @classmethod
    def clean_instagram(cls, v: str | None):
        return _clean_handle(v)


class PlayerPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    instagram: str | None = None
    group_size: int
    event_id: UUID | None = None
    event_name: str | None = None
    created_at: datetime


class EventAssignment(BaseModel):
    player_ids: list[UUID] = Field(min_length=1)
    event_id: UUID
