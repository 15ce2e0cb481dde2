from __future__ import annotations
import os
from pydantic import BaseModel
from moveathon.errors import ScoringConfigError
from moveathon.schemas.challenge import ChallengeConfig


def _csv(name: str, default: str = "") -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "moveathon-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Move-a-thon Mania")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/moveathon_dev")
    admin_token: str = os.getenv("ADMIN_TOKEN", "")

    # Challenge window (ISO instants, IST by default)
    challenge_start: str = os.getenv("CHALLENGE_START", "2025-10-01T00:00:00+05:30")
    exclusion_window_start: str | None = os.getenv("EXCLUSION_WINDOW_START", "2025-10-16T00:00:00+05:30") or None
    refresh_freeze_start: str | None = os.getenv("REFRESH_FREEZE_START") or None
    challenge_end: str | None = os.getenv("CHALLENGE_END") or None
    work_hours_start: str = os.getenv("WORK_HOURS_START", "07:30")
    work_hours_end: str = os.getenv("WORK_HOURS_END", "15:45")
    challenge_timezone: str = os.getenv("CHALLENGE_TIMEZONE", "Asia/Kolkata")
    holidays: list[str] = _csv("HOLIDAYS", "2025-10-20,2025-10-21")

    # Scoring weights have no defaults; an unset weight makes the config invalid
    weight_run: str | None = os.getenv("WEIGHT_RUN") or None
    weight_walk: str | None = os.getenv("WEIGHT_WALK") or None
    weight_cycle: str | None = os.getenv("WEIGHT_CYCLE") or None
    leaderboard_top_n: int = int(os.getenv("LEADERBOARD_TOP_N", "3"))
    walk_pace_threshold: float = float(os.getenv("WALK_PACE_THRESHOLD", "8.5"))

    def challenge_config(self) -> ChallengeConfig:
        """Build the validated challenge configuration from the environment."""
        missing = [
            name for name, value in (
                ("WEIGHT_RUN", self.weight_run),
                ("WEIGHT_WALK", self.weight_walk),
                ("WEIGHT_CYCLE", self.weight_cycle),
            ) if value is None
        ]
        if missing:
            raise ScoringConfigError(f"scoring weights not configured: {', '.join(missing)}")
        try:
            return ChallengeConfig.model_validate({
                "challenge_start": self.challenge_start,
                "exclusion_window_start": self.exclusion_window_start,
                "refresh_freeze_start": self.refresh_freeze_start,
                "challenge_end": self.challenge_end,
                "work_hours": {"start": self.work_hours_start, "end": self.work_hours_end},
                "time_zone": self.challenge_timezone,
                "holidays": self.holidays,
                "scoring_weights": {
                    "run": self.weight_run,
                    "walk": self.weight_walk,
                    "cycle": self.weight_cycle,
                },
                "top_n": self.leaderboard_top_n,
                "walk_pace_threshold": self.walk_pace_threshold,
            })
        except ValueError as e:
            raise ScoringConfigError(f"invalid challenge configuration: {e}") from e


settings = Settings()
