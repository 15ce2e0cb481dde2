from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
import structlog
from moveathon.repository import ActivityStore, get_store
from moveathon.schemas.profile import ProfilePublic, RegisterRequest, WeightEntry
from moveathon.services.normalizer import UserProfile

router = APIRouter(tags=["profiles"])
log = structlog.get_logger()


def to_public(p: UserProfile) -> ProfilePublic:
    return ProfilePublic(
        user_id=p.user_id, first_name=p.first_name, last_name=p.last_name,
        name=p.name, team=p.team, gender=p.gender,
    )


async def _require_profile(store: ActivityStore, user_id: str) -> UserProfile:
    profile = await store.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.post("/register", response_model=ProfilePublic)
async def register(payload: RegisterRequest, store: ActivityStore = Depends(get_store)):
    profile = await store.upsert_profile(
        payload.user_id, payload.first_name.strip(), payload.last_name.strip(),
        team=payload.team, gender=payload.gender,
    )
    log.info("profile_registered", user_id=profile.user_id, team=profile.team)
    return to_public(profile)


@router.get("/users/{user_id}/profile", response_model=ProfilePublic)
async def get_profile(user_id: str, store: ActivityStore = Depends(get_store)):
    return to_public(await _require_profile(store, user_id))


@router.post("/users/{user_id}/weight", response_model=WeightEntry)
async def log_weight(user_id: str, payload: WeightEntry, store: ActivityStore = Depends(get_store)):
    await _require_profile(store, user_id)
    entry = await store.upsert_weight(user_id, payload.date, payload.weight)
    log.info("weight_logged", user_id=user_id, date=str(entry.date))
    return entry


@router.get("/users/{user_id}/weight", response_model=list[WeightEntry])
async def list_weight(user_id: str, store: ActivityStore = Depends(get_store)):
    await _require_profile(store, user_id)
    return await store.list_weights(user_id)
