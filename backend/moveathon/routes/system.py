from __future__ import annotations
from fastapi import APIRouter, Request
from datetime import datetime, timezone
from moveathon.config import settings
from moveathon.errors import ScoringConfigError

router = APIRouter(tags=["system"])

@router.get("/health")
async def health(request: Request):
    try:
        settings.challenge_config()
        config_ok = True
    except ScoringConfigError:
        config_ok = False
    return {
        "status": "ok",
        "env": settings.environment,
        "time": datetime.now(timezone.utc).isoformat(),
        "challenge_config": "ok" if config_ok else "incomplete",
        "request_id": request.headers.get("x-request-id") or request.state.request_id,
    }

@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
    }
