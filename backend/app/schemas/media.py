from __future__ import annotations
from pydantic import BaseModel, Field, field_validator


class MediaConfigIn(BaseModel):
    playlist_id: str = Field(min_length=1, max_length=128)

    @field_validator("playlist_id", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class MediaConfigPublic(BaseModel):
    playlist_id: str
    embed_url: str
    is_default: bool = False
