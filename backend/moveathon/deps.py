from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from fastapi import HTTPException
import structlog
from moveathon.config import settings
from moveathon.errors import ScoringConfigError
from moveathon.schemas.challenge import ChallengeConfig

log = structlog.get_logger()


def get_challenge_config() -> ChallengeConfig:
    try:
        return settings.challenge_config()
    except ScoringConfigError as e:
        log.error("challenge_config_invalid", error=str(e))
        raise HTTPException(status_code=503, detail="Challenge configuration incomplete")


def get_now() -> datetime:
    return datetime.now(dt_tz.utc)
