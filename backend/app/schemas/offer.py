from __future__ import annotations
from datetime import datetime, time, timezone
from typing import Literal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RewardType = Literal["food", "discount", "bonus_time"]
TriggerType = Literal["random_drop", "highscore", "scheduled", "streak"]
DayOfWeek = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DAYS_OF_WEEK: tuple[str, ...] = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def parse_hhmm(value: str) -> time:
    """Parse an "HH:MM" wall-clock string; raises ValueError when malformed."""
    try:
        hh, mm = value.split(":")
        if len(hh) != 2 or len(mm) != 2:
            raise ValueError
        return time(int(hh), int(mm))
    except (ValueError, AttributeError):
        raise ValueError(f"expected HH:MM, got {value!r}")


class OfferIn(BaseModel):
    title: str = Field(min_length=1, max_length=120)
    description: str = Field(default="", max_length=2000)
    reward_type: RewardType
    value: str = Field(default="", max_length=120)
    trigger_type: TriggerType
    start_time: datetime | None = None
    end_time: datetime | None = None
    days_of_week: list[DayOfWeek] = Field(default_factory=list)
    recurring_start_time: str | None = None
    recurring_end_time: str | None = None
    is_active: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def assume_utc(cls, v: datetime | None):
        # naive instants are UTC, matching how the live-offer check reads them
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("recurring_start_time", "recurring_end_time")
    @classmethod
    def check_hhmm(cls, v: str | None):
        if v is not None:
            parse_hhmm(v)
        return v

    @field_validator("days_of_week")
    @classmethod
    def dedupe_days(cls, v: list[str]):
        # keep calendar order, drop repeats
        return [d for d in DAYS_OF_WEEK if d in set(v)]

    @model_validator(mode="after")
    def one_schedule(self):
        one_time = self.start_time is not None or self.end_time is not None
        recurring = bool(self.days_of_week) or self.recurring_start_time is not None or self.recurring_end_time is not None
        if one_time and recurring:
            raise ValueError("an offer is either one-time or recurring, not both")
        if not one_time and not recurring:
            raise ValueError("an offer needs a one-time range or a recurring weekly schedule")
        if one_time:
            if self.start_time is None or self.end_time is None:
                raise ValueError("one-time offers need both start_time and end_time")
            if self.end_time <= self.start_time:
                raise ValueError("end_time must be after start_time")
        else:
            if not self.days_of_week:
                raise ValueError("recurring offers need at least one day of the week")
            if self.recurring_start_time is None or self.recurring_end_time is None:
                raise ValueError("recurring offers need recurring_start_time and recurring_end_time")
            # equal start and end is a full 24h window
        return self


class OfferActiveUpdate(BaseModel):
    is_active: bool


class OfferPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    reward_type: RewardType
    value: str
    trigger_type: TriggerType
    start_time: datetime | None = None
    end_time: datetime | None = None
    days_of_week: list[DayOfWeek] = Field(default_factory=list)
    recurring_start_time: str | None = None
    recurring_end_time: str | None = None
    is_active: bool
    created_at: datetime
