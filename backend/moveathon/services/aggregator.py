from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Mapping
from moveathon.errors import ScoringConfigError
from moveathon.schemas.challenge import ScoringWeights
from moveathon.services.normalizer import (
    Activity, UserProfile, CYCLE_TYPES, RECLASSIFIED_WALK, RUN_TYPES, WALK_TYPES,
)

RUN, WALK, CYCLE = "run", "walk", "cycle"
CATEGORIES = (RUN, WALK, CYCLE)


def bucket_for(category: str) -> str | None:
    """Scoring bucket of an effective category; None for categories that do not score."""
    if category in RUN_TYPES:
        return RUN
    if category in WALK_TYPES or category == RECLASSIFIED_WALK:
        return WALK
    if category in CYCLE_TYPES:
        return CYCLE
    return None


@dataclass(slots=True)
class UserTotals:
    user_id: str
    name: str = ""
    team: str | None = None
    gender: str | None = None
    run: float = 0.0
    walk: float = 0.0
    cycle: float = 0.0
    points: float = 0.0

    def total(self, category: str) -> float:
        if category not in CATEGORIES and category != "points":
            raise ValueError(f"unknown category {category!r}")
        return getattr(self, category)


@dataclass(slots=True)
class Aggregate:
    per_user: dict[str, UserTotals] = field(default_factory=dict)
    per_team: dict[str, float] = field(default_factory=dict)


def _check_weights(weights: ScoringWeights | None) -> ScoringWeights:
    if weights is None:
        raise ScoringConfigError("scoring weights are required")
    if not isinstance(weights, ScoringWeights):
        try:
            weights = ScoringWeights.model_validate(weights)
        except ValueError as e:
            raise ScoringConfigError(f"invalid scoring weights: {e}") from e
    return weights


def aggregate(
    activities: Iterable[Activity],
    profiles: Mapping[str, UserProfile],
    weights: ScoringWeights,
    include_all_profiles: bool = True,
) -> Aggregate:
    """
    Sum distance (km) and points per user by effective category, then per team.

    Activities are expected to be eligible already. With `include_all_profiles`
    every known profile gets a row, even without activities, so that ranks and
    participant counts cover the whole roster.
    """
    weights = _check_weights(weights)
    per_weight = {RUN: weights.run, WALK: weights.walk, CYCLE: weights.cycle}
    result = Aggregate()

    def _row(user_id: str) -> UserTotals:
        row = result.per_user.get(user_id)
        if row is None:
            p = profiles.get(user_id) or UserProfile(user_id=user_id)
            row = UserTotals(user_id=user_id, name=p.name, team=p.team, gender=p.gender)
            result.per_user[user_id] = row
        return row

    if include_all_profiles:
        for user_id in profiles:
            _row(user_id)

    for a in activities:
        row = _row(a.user_id)
        bucket = bucket_for(a.effective_type)
        if bucket is None:
            continue
        km = a.distance_km
        setattr(row, bucket, getattr(row, bucket) + km)
        row.points += km * per_weight[bucket]

    for row in result.per_user.values():
        if not row.team:
            continue
        result.per_team[row.team] = result.per_team.get(row.team, 0.0) + row.points
    return result


def raw_distance_by_type(activities: Iterable[Activity]) -> dict[str, float]:
    """Kilometers per original `type`, every type included. Independent of scoring buckets."""
    totals: dict[str, float] = {}
    for a in activities:
        totals[a.type] = totals.get(a.type, 0.0) + a.distance_km
    return totals
