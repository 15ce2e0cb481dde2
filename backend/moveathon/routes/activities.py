from __future__ import annotations
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query
import structlog
from moveathon.auth_deps import require_admin
from moveathon.deps import get_challenge_config, get_now
from moveathon.repository import ActivityStore, get_store
from moveathon.routes.leaderboard import cutoff
from moveathon.schemas.activity import (
    ActivityPublic, ImportRequest, ImportResult, ReactionCount, ReactionRequest, ReactionResult,
    SuspiciousActivity, ValidityUpdate,
)
from moveathon.schemas.challenge import ChallengeConfig
from moveathon.services.importer import merge_imports
from moveathon.services.normalizer import Activity, UserProfile, Validity
from moveathon.services.reactions import count_reactions, toggle
from moveathon.services.scoring import ScoredActivity, as_profiles, score_activities

router = APIRouter(prefix="/activities", tags=["activities"])
log = structlog.get_logger()

_STATES = {"auto": Validity.AUTO, "valid": Validity.LOCKED_VALID, "invalid": Validity.LOCKED_INVALID}


def to_public(a: Activity, profile: UserProfile | None) -> dict:
    return dict(
        id=a.id,
        user_id=a.user_id,
        athlete=profile.name if profile else "",
        team=profile.team if profile else None,
        name=a.name,
        type=a.effective_type,
        original_type=a.type,
        derived_type=a.derived_type,
        distance=a.distance,
        moving_time=a.moving_time,
        start_date=a.start_date,
        strava_url=a.strava_url,
        is_valid_locked=a.is_valid_locked,
    )


async def _scored(store: ActivityStore, config: ChallengeConfig, now: datetime) -> tuple[list[ScoredActivity], dict[str, UserProfile]]:
    activities = await store.list_activities(since=cutoff(config, now))
    return score_activities(activities, config, now), as_profiles(await store.list_profiles())


@router.get("", response_model=list[ActivityPublic])
async def list_activities(
    limit: int = Query(default=100, ge=1, le=1000),
    store: ActivityStore = Depends(get_store),
    config: ChallengeConfig = Depends(get_challenge_config),
    now: datetime = Depends(get_now),
):
    scored, profiles = await _scored(store, config, now)
    out = [to_public(s.activity, profiles.get(s.activity.user_id)) for s in scored if s.eligible]
    return out[:limit]


@router.get("/suspicious", response_model=list[SuspiciousActivity])
async def list_suspicious(
    store: ActivityStore = Depends(get_store),
    config: ChallengeConfig = Depends(get_challenge_config),
    now: datetime = Depends(get_now),
):
    scored, profiles = await _scored(store, config, now)
    return [
        {**to_public(s.activity, profiles.get(s.activity.user_id)), "reason": s.verdict.reason.value}
        for s in scored if not s.eligible
    ]


@router.get("/reactions", response_model=list[ReactionCount])
async def list_reactions(
    activity_id: str | None = Query(default=None),
    store: ActivityStore = Depends(get_store),
):
    return count_reactions(await store.list_reactions(activity_id))


@router.post("/{activity_id}/reactions", response_model=ReactionResult)
async def react(
    activity_id: str,
    payload: ReactionRequest,
    store: ActivityStore = Depends(get_store),
):
    if await store.get_activity(activity_id) is None:
        raise HTTPException(status_code=404, detail="Activity not found")
    if await store.get_profile(payload.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    action = toggle(await store.get_reaction(activity_id, payload.user_id), payload.reaction_type)
    if action == "removed":
        await store.delete_reaction(activity_id, payload.user_id)
    else:
        await store.put_reaction(activity_id, payload.user_id, payload.reaction_type)
    log.info("activity_reaction", activity_id=activity_id, user_id=payload.user_id, action=action)
    return ReactionResult(action=action)


@router.post("/import/{user_id}", response_model=ImportResult)
async def import_activities(
    user_id: str,
    payload: ImportRequest,
    store: ActivityStore = Depends(get_store),
    config: ChallengeConfig = Depends(get_challenge_config),
    now: datetime = Depends(get_now),
    _admin: str = Depends(require_admin),
):
    if await store.get_profile(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    existing = await store.activities_by_strava_id(user_id)
    plan = merge_imports(user_id, payload.activities, existing, config, now)
    imported = await store.upsert_activities(plan.rows)
    log.info("activities_imported", user_id=user_id, imported=imported, skipped=dict(plan.skipped))
    return ImportResult(imported=imported, skipped=dict(plan.skipped))


@router.patch("/{activity_id}/validity", response_model=ActivityPublic)
async def set_validity(
    activity_id: str,
    payload: ValidityUpdate,
    store: ActivityStore = Depends(get_store),
    _admin: str = Depends(require_admin),
):
    a = await store.set_validity(activity_id, _STATES[payload.state])
    if a is None:
        raise HTTPException(status_code=404, detail="Activity not found")
    log.info("activity_validity_set", activity_id=activity_id, state=payload.state)
    return to_public(a, await store.get_profile(a.user_id))


@router.delete("/{activity_id}/reclassification", response_model=ActivityPublic)
async def clear_reclassification(
    activity_id: str,
    store: ActivityStore = Depends(get_store),
    _admin: str = Depends(require_admin),
):
    a = await store.clear_reclassification(activity_id)
    if a is None:
        raise HTTPException(status_code=404, detail="Activity not found")
    log.info("activity_reclassification_cleared", activity_id=activity_id)
    return to_public(a, await store.get_profile(a.user_id))
