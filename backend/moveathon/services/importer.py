from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterable, Mapping
from moveathon.schemas.challenge import ChallengeConfig
from moveathon.services.classifier import with_classification
from moveathon.services.eligibility import evaluate
from moveathon.services.normalizer import Activity, normalize

STRAVA_ACTIVITY_URL = "https://www.strava.com/activities/{}"


@dataclass(slots=True)
class ImportPlan:
    rows: list[dict[str, Any]] = field(default_factory=list)
    skipped: Counter = field(default_factory=Counter)


def _row(a: Activity, strava_id: str) -> dict[str, Any]:
    return {
        "user_id": a.user_id,
        "strava_id": strava_id,
        "name": a.name,
        "type": a.type,
        "derived_type": a.derived_type,
        "distance": a.distance,
        "moving_time": int(a.moving_time),
        "start_date": a.start_date,
        "strava_url": a.strava_url or STRAVA_ACTIVITY_URL.format(strava_id),
        "manual": a.manual,
        "is_valid": a.is_valid,
    }


def merge_imports(
    user_id: str,
    incoming: Iterable[Mapping[str, Any]],
    existing: Mapping[str, Activity],
    config: ChallengeConfig,
    now: datetime,
) -> ImportPlan:
    """
    Turn freshly fetched tracker records into upsert rows for one user.

    `existing` maps tracker ids to stored activities. Locked rows and rows
    inside the refresh freeze are left untouched; a stored reclassification
    is carried over instead of being recomputed.
    """
    plan = ImportPlan()
    seen: set[str] = set()
    for raw in incoming:
        # Validity and reclassification are ours to decide, never the tracker's
        a = normalize({**raw, "user_id": user_id, "derived_type": None, "is_valid": True, "is_valid_locked": False})
        strava_id = a.id
        if not strava_id:
            plan.skipped["missing_id"] += 1
            continue
        if strava_id in seen:
            plan.skipped["duplicate"] += 1
            continue
        seen.add(strava_id)
        if a.manual:
            plan.skipped["manual"] += 1
            continue
        if a.start_date is None:
            plan.skipped["missing_start"] += 1
            continue
        if config.challenge_end is not None and a.end_date > config.challenge_end:
            plan.skipped["after_challenge_end"] += 1
            continue

        stored = existing.get(strava_id)
        if stored is not None:
            if stored.is_valid_locked:
                plan.skipped["locked"] += 1
                continue
            frozen_before = config.refresh_freeze_start
            if frozen_before is not None and stored.start_date is not None and stored.start_date < frozen_before:
                plan.skipped["frozen"] += 1
                continue
            if stored.derived_type:
                a = replace(a, derived_type=stored.derived_type)

        a = with_classification(a, config.walk_pace_threshold)
        a = replace(a, is_valid=evaluate(a, config, now).eligible)
        plan.rows.append(_row(a, strava_id))
    return plan
