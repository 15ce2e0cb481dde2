from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LeaderboardUser(_Payload):
    user_id: str
    name: str
    team: str | None = None
    run: float
    walk: float
    cycle: float
    points: int


class TeamScore(_Payload):
    team: str
    points: int


class Leaderboard(_Payload):
    runners: list[LeaderboardUser]
    walkers: list[LeaderboardUser]
    cyclers: list[LeaderboardUser]
    teams: list[TeamScore]
    top_by_gender: list[LeaderboardUser] | None = None


class TeamMember(_Payload):
    user_id: str
    name: str
    run: float
    walk: float
    cycle: float
    points: int


class TeamPerformance(_Payload):
    team_name: str
    total_points: int
    members: list[TeamMember]


class UserStats(_Payload):
    total_activities: int = 0
    total_km: float = 0.0
    walk_km: float = 0.0
    run_km: float = 0.0
    cycle_km: float = 0.0
    active_days: int = 0
    longest_walk: float | None = None
    longest_run: float | None = None
    longest_cycle: float | None = None
    total_points: int = 0
    team_rank: int | None = None
    overall_rank: int | None = None
    total_participants: int = 0
    # every eligible activity by original type, scoring buckets ignored
    distance_by_type: dict[str, float] = Field(default_factory=dict)
