from __future__ import annotations
from typing import Mapping
from moveathon.services.aggregator import UserTotals


def rank_users(per_user: Mapping[str, UserTotals], category: str, top_n: int) -> list[UserTotals]:
    """Users with a positive total in `category`, descending; ties keep input order."""
    rows = [u for u in per_user.values() if u.total(category) > 0]
    rows.sort(key=lambda u: u.total(category), reverse=True)
    return rows[:top_n]


def rank_teams(per_team: Mapping[str, float], top_n: int | None = None) -> list[tuple[str, float]]:
    rows = sorted(per_team.items(), key=lambda kv: kv[1], reverse=True)
    return rows if top_n is None else rows[:top_n]


def rank_by_gender(per_user: Mapping[str, UserTotals], gender: str, top_n: int) -> list[UserTotals]:
    wanted = gender.strip().lower()
    rows = [
        u for u in per_user.values()
        if u.gender and u.gender.strip().lower() == wanted and u.points > 0
    ]
    rows.sort(key=lambda u: u.points, reverse=True)
    return rows[:top_n]


def position_of(per_user: Mapping[str, UserTotals], user_id: str, team: str | None = None) -> int | None:
    """1-based rank by points, overall or within `team`. None if the user is not ranked."""
    rows = [u for u in per_user.values() if team is None or u.team == team]
    rows.sort(key=lambda u: u.points, reverse=True)
    for i, u in enumerate(rows, start=1):
        if u.user_id == user_id:
            return i
    return None
