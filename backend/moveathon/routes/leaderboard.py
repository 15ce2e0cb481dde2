from __future__ import annotations
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query
import structlog
from moveathon.deps import get_challenge_config, get_now
from moveathon.repository import ActivityStore, get_store
from moveathon.schemas.challenge import ChallengeConfig
from moveathon.schemas.scoring import Leaderboard, TeamPerformance, UserStats
from moveathon.services.scoring import build_leaderboard, build_team_performance, build_user_stats

router = APIRouter(tags=["leaderboard"])
log = structlog.get_logger()


def cutoff(config: ChallengeConfig, now: datetime) -> datetime | None:
    # Before the challenge opens every stored activity is fetched (testing mode)
    return config.challenge_start if now >= config.challenge_start else None


@router.get("/leaderboard", response_model=Leaderboard)
async def leaderboard(
    gender: str | None = Query(default=None, max_length=16),
    store: ActivityStore = Depends(get_store),
    config: ChallengeConfig = Depends(get_challenge_config),
    now: datetime = Depends(get_now),
):
    activities = await store.list_activities(since=cutoff(config, now))
    profiles = await store.list_profiles()
    board = build_leaderboard(activities, profiles, config, now, gender=gender)
    log.info("leaderboard_built", activities=len(activities), profiles=len(profiles))
    return board


@router.get("/team-performance", response_model=list[TeamPerformance])
async def team_performance(
    store: ActivityStore = Depends(get_store),
    config: ChallengeConfig = Depends(get_challenge_config),
    now: datetime = Depends(get_now),
):
    activities = await store.list_activities(since=cutoff(config, now))
    return build_team_performance(activities, await store.list_profiles(), config, now)


@router.get("/users/{user_id}/stats", response_model=UserStats)
async def user_stats(
    user_id: str,
    store: ActivityStore = Depends(get_store),
    config: ChallengeConfig = Depends(get_challenge_config),
    now: datetime = Depends(get_now),
):
    if await store.get_profile(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    activities = await store.list_activities(since=cutoff(config, now))
    return build_user_stats(activities, await store.list_profiles(), config, now, user_id)
