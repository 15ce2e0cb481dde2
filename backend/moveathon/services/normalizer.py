from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_tz
from enum import Enum
from typing import Any, Mapping

RUN_TYPES = frozenset({"Run", "TrailRun"})
WALK_TYPES = frozenset({"Walk"})
CYCLE_TYPES = frozenset({"Ride", "VirtualRide"})
RECLASSIFIED_WALK = "Reclassified-Walk"


class Validity(str, Enum):
    """Administrator override state derived from (is_valid, is_valid_locked)."""
    AUTO = "auto"
    LOCKED_VALID = "locked_valid"
    LOCKED_INVALID = "locked_invalid"

    @classmethod
    def from_flags(cls, is_valid: bool, is_valid_locked: bool) -> "Validity":
        if not is_valid_locked:
            return cls.AUTO
        return cls.LOCKED_VALID if is_valid else cls.LOCKED_INVALID


@dataclass(frozen=True, slots=True)
class Activity:
    id: str
    user_id: str
    type: str
    distance: float = 0.0
    moving_time: float = 0.0
    start_date: datetime | None = None
    manual: bool = False
    derived_type: str | None = None
    is_valid: bool = True
    is_valid_locked: bool = False
    name: str | None = None
    strava_url: str | None = None

    @property
    def validity(self) -> Validity:
        return Validity.from_flags(self.is_valid, self.is_valid_locked)

    @property
    def distance_km(self) -> float:
        return self.distance / 1000

    @property
    def end_date(self) -> datetime | None:
        if self.start_date is None:
            return None
        return self.start_date + timedelta(seconds=self.moving_time)

    @property
    def effective_type(self) -> str:
        return self.derived_type or self.type


@dataclass(frozen=True, slots=True)
class UserProfile:
    user_id: str
    first_name: str = ""
    last_name: str = ""
    team: str | None = None
    gender: str | None = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def _num(value: Any) -> float:
    try:
        n = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(n) or math.isinf(n) or n < 0:
        return 0.0
    return n


def _flag(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "t", "yes")
    return bool(value)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_instant(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime. Naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=dt_tz.utc)
    return dt.astimezone(dt_tz.utc)


def normalize(raw: Mapping[str, Any]) -> Activity:
    """Map a stored row or tracker payload onto the canonical Activity shape."""
    ident = raw.get("id")
    if ident is None:
        ident = raw.get("strava_id")
    return Activity(
        id=str(ident) if ident is not None else "",
        user_id=str(raw.get("user_id") or ""),
        type=_text(raw.get("type")) or "",
        distance=_num(raw.get("distance")),
        moving_time=_num(raw.get("moving_time")),
        start_date=parse_instant(raw.get("start_date")),
        manual=_flag(raw.get("manual")),
        derived_type=_text(raw.get("derived_type")),
        is_valid=_flag(raw.get("is_valid"), default=True),
        is_valid_locked=_flag(raw.get("is_valid_locked")),
        name=_text(raw.get("name")),
        strava_url=_text(raw.get("strava_url")),
    )


def normalize_profile(raw: Mapping[str, Any]) -> UserProfile:
    return UserProfile(
        user_id=str(raw.get("user_id") or ""),
        first_name=_text(raw.get("first_name")) or "",
        last_name=_text(raw.get("last_name")) or "",
        team=_text(raw.get("team")),
        gender=_text(raw.get("gender")),
    )
