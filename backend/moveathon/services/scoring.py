from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping
from moveathon.schemas.challenge import ChallengeConfig
from moveathon.schemas.scoring import Leaderboard, LeaderboardUser, TeamMember, TeamPerformance, TeamScore, UserStats
from moveathon.services.aggregator import CYCLE, RUN, WALK, UserTotals, aggregate, bucket_for, raw_distance_by_type
from moveathon.services.classifier import with_classification
from moveathon.services.eligibility import Verdict, evaluate
from moveathon.services.normalizer import (
    Activity, UserProfile, CYCLE_TYPES, RUN_TYPES, normalize, normalize_profile,
)
from moveathon.services.ranker import position_of, rank_by_gender, rank_teams, rank_users
from moveathon.services.time_windows import civil_date


@dataclass(frozen=True, slots=True)
class ScoredActivity:
    activity: Activity
    verdict: Verdict

    @property
    def eligible(self) -> bool:
        return self.verdict.eligible


def _km(v: float) -> float:
    return round(v, 1)


def _pts(v: float) -> int:
    return int(round(v))


def as_activity(row: Activity | Mapping[str, Any]) -> Activity:
    return row if isinstance(row, Activity) else normalize(row)


def as_profiles(rows: Iterable[UserProfile | Mapping[str, Any]]) -> dict[str, UserProfile]:
    out: dict[str, UserProfile] = {}
    for r in rows:
        p = r if isinstance(r, UserProfile) else normalize_profile(r)
        out[p.user_id] = p
    return out


def score_activities(
    rows: Iterable[Activity | Mapping[str, Any]],
    config: ChallengeConfig,
    now: datetime,
) -> list[ScoredActivity]:
    """Normalize, classify and judge every row. Input order is preserved."""
    scored = []
    for row in rows:
        a = with_classification(as_activity(row), config.walk_pace_threshold)
        scored.append(ScoredActivity(a, evaluate(a, config, now)))
    return scored


def eligible_activities(scored: Iterable[ScoredActivity]) -> list[Activity]:
    return [s.activity for s in scored if s.eligible]


def _aggregate(rows, profiles, config, now):
    profile_map = as_profiles(profiles)
    scored = score_activities(rows, config, now)
    agg = aggregate(eligible_activities(scored), profile_map, config.scoring_weights)
    return scored, agg


def _user_entry(u: UserTotals) -> LeaderboardUser:
    return LeaderboardUser(
        user_id=u.user_id, name=u.name, team=u.team,
        run=_km(u.run), walk=_km(u.walk), cycle=_km(u.cycle), points=_pts(u.points),
    )


def build_leaderboard(
    rows: Iterable[Activity | Mapping[str, Any]],
    profiles: Iterable[UserProfile | Mapping[str, Any]],
    config: ChallengeConfig,
    now: datetime,
    gender: str | None = None,
) -> Leaderboard:
    _, agg = _aggregate(rows, profiles, config, now)
    n = config.top_n
    board = Leaderboard(
        runners=[_user_entry(u) for u in rank_users(agg.per_user, RUN, n)],
        walkers=[_user_entry(u) for u in rank_users(agg.per_user, WALK, n)],
        cyclers=[_user_entry(u) for u in rank_users(agg.per_user, CYCLE, n)],
        teams=[TeamScore(team=t, points=_pts(p)) for t, p in rank_teams(agg.per_team, n)],
    )
    if gender:
        board.top_by_gender = [_user_entry(u) for u in rank_by_gender(agg.per_user, gender, n)]
    return board


def build_team_performance(
    rows: Iterable[Activity | Mapping[str, Any]],
    profiles: Iterable[UserProfile | Mapping[str, Any]],
    config: ChallengeConfig,
    now: datetime,
) -> list[TeamPerformance]:
    _, agg = _aggregate(rows, profiles, config, now)
    members: dict[str, list[TeamMember]] = {}
    for u in agg.per_user.values():
        if not u.team:
            continue
        members.setdefault(u.team, []).append(TeamMember(
            user_id=u.user_id, name=u.name,
            run=_km(u.run), walk=_km(u.walk), cycle=_km(u.cycle), points=_pts(u.points),
        ))
    return [
        TeamPerformance(team_name=team, total_points=_pts(points), members=members.get(team, []))
        for team, points in rank_teams(agg.per_team)
    ]


def _longest(acts: list[Activity], keep) -> float | None:
    distances = [a.distance_km for a in acts if keep(a)]
    return _km(max(distances)) if distances else None


def build_user_stats(
    rows: Iterable[Activity | Mapping[str, Any]],
    profiles: Iterable[UserProfile | Mapping[str, Any]],
    config: ChallengeConfig,
    now: datetime,
    user_id: str,
) -> UserStats:
    """
    Per-user dashboard numbers. Totals and points use the scoring buckets
    (effective category); longest run and longest ride use the original type,
    while longest walk also counts reclassified runs.
    """
    scored, agg = _aggregate(rows, profiles, config, now)
    me = agg.per_user.get(user_id)
    if me is None:
        return UserStats(total_participants=len(agg.per_user))

    mine = [a for a in eligible_activities(scored) if a.user_id == user_id]
    active_days = {civil_date(a.start_date, config.time_zone) for a in mine if a.start_date is not None}
    return UserStats(
        total_activities=len(mine),
        total_km=_km(me.run + me.walk + me.cycle),
        walk_km=_km(me.walk),
        run_km=_km(me.run),
        cycle_km=_km(me.cycle),
        active_days=len(active_days),
        longest_walk=_longest(mine, lambda a: bucket_for(a.effective_type) == WALK),
        longest_run=_longest(mine, lambda a: a.type in RUN_TYPES),
        longest_cycle=_longest(mine, lambda a: a.type in CYCLE_TYPES),
        total_points=_pts(me.points),
        team_rank=position_of(agg.per_user, user_id, team=me.team) if me.team else None,
        overall_rank=position_of(agg.per_user, user_id),
        total_participants=len(agg.per_user),
        distance_by_type={t: _km(km) for t, km in raw_distance_by_type(mine).items()},
    )
