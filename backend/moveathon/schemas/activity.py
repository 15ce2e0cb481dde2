from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Any, Literal
from datetime import datetime

ValidityState = Literal["auto", "valid", "invalid"]
ReactionType = Literal["like", "love", "fire"]


class ActivityPublic(BaseModel):
    id: str
    user_id: str
    athlete: str
    team: str | None = None
    name: str | None = None
    type: str                       # effective category (reclassification applied)
    original_type: str
    derived_type: str | None = None
    distance: float                 # meters
    moving_time: float              # seconds
    start_date: datetime | None
    strava_url: str | None = None
    is_valid_locked: bool = False


class SuspiciousActivity(ActivityPublic):
    reason: str


class ValidityUpdate(BaseModel):
    state: ValidityState = Field(description="valid|invalid locks the decision, auto hands it back to the rules")


class ImportRequest(BaseModel):
    activities: list[dict[str, Any]]


class ImportResult(BaseModel):
    imported: int
    skipped: dict[str, int] = Field(default_factory=dict)


class ReactionRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=64)
    reaction_type: ReactionType


class ReactionResult(BaseModel):
    action: Literal["inserted", "updated", "removed"]


class ReactionCount(BaseModel):
    activity_id: str
    reaction_type: ReactionType
    count: int
