from __future__ import annotations
from datetime import date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


class WorkHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    @field_serializer("start", "end")
    def serialize_time(self, value: time) -> str:
        return value.strftime('%H:%M:%S')

    start: time
    end: time

    @model_validator(mode="after")
    def ordered(self):
        if self.end <= self.start:
            raise ValueError("work_hours end must be after start")
        return self


class ScoringWeights(BaseModel):
    """Points per kilometer for each scoring bucket. No defaults on purpose."""
    model_config = ConfigDict(frozen=True)

    run: float = Field(ge=0)
    walk: float = Field(ge=0)
    cycle: float = Field(ge=0)


class ChallengeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    challenge_start: datetime
    exclusion_window_start: datetime | None = None
    work_hours: WorkHours
    holidays: frozenset[date] = frozenset()
    time_zone: str = "Asia/Kolkata"
    scoring_weights: ScoringWeights
    top_n: int = Field(default=3, ge=1)
    walk_pace_threshold: float = Field(default=8.5, gt=0)

    # Import-only cutoffs
    refresh_freeze_start: datetime | None = None
    challenge_end: datetime | None = None

    @field_validator("challenge_start", "exclusion_window_start", "refresh_freeze_start", "challenge_end")
    @classmethod
    def must_be_aware(cls, v: datetime | None):
        if v is not None and v.tzinfo is None:
            raise ValueError("instants must carry a UTC offset")
        return v

    @field_validator("time_zone")
    @classmethod
    def known_zone(cls, v: str):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown time zone {v!r}")
        return v

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)
