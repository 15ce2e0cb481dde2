from __future__ import annotations
import itertools
from dataclasses import replace
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo
import pytest
from fastapi.testclient import TestClient
from moveathon.deps import get_challenge_config, get_now
from moveathon.main import app
from moveathon.repository import get_store
from moveathon.schemas.challenge import ChallengeConfig, ScoringWeights, WorkHours
from moveathon.schemas.profile import WeightEntry
from moveathon.services.normalizer import Activity, UserProfile, Validity, normalize

IST = ZoneInfo("Asia/Kolkata")


def ist(*args) -> datetime:
    return datetime(*args, tzinfo=IST)


@pytest.fixture
def config() -> ChallengeConfig:
    return ChallengeConfig(
        challenge_start=ist(2025, 10, 1),
        exclusion_window_start=ist(2025, 10, 16),
        work_hours=WorkHours(start=time(7, 30), end=time(15, 45)),
        holidays=frozenset({date(2025, 10, 20), date(2025, 10, 21)}),
        time_zone="Asia/Kolkata",
        scoring_weights=ScoringWeights(run=15, walk=14, cycle=6),
        top_n=3,
    )


@pytest.fixture
def now() -> datetime:
    return ist(2025, 10, 31, 12, 0)


@pytest.fixture
def make_activity():
    ids = itertools.count(1)

    def _make(user_id="u1", type="Run", km=5.0, seconds=1800, start=None, **kw) -> Activity:
        start = start if start is not None else ist(2025, 10, 17, 17, 0)
        return Activity(
            id=kw.pop("id", str(next(ids))),
            user_id=user_id,
            type=type,
            distance=km * 1000,
            moving_time=seconds,
            start_date=start.astimezone(timezone.utc),
            **kw,
        )
    return _make


@pytest.fixture
def roster() -> list[UserProfile]:
    return [
        UserProfile(user_id="u1", first_name="Asha", last_name="Rao", team="Alpha", gender="M"),
        UserProfile(user_id="u2", first_name="Bina", last_name="Das", team="Alpha", gender="F"),
        UserProfile(user_id="u3", first_name="Chitra", last_name="Iyer", team=None, gender="F"),
    ]


@pytest.fixture
def week(make_activity) -> list[Activity]:
    """A small mixed week: u1 has a work-hours ride, a reclassified run and two clean activities."""
    return [
        make_activity("u1", "Run", km=10, seconds=3600, start=ist(2025, 10, 17, 17, 0), id="a-run"),
        make_activity("u1", "Run", km=5, seconds=2700, start=ist(2025, 10, 18, 9, 0), id="a-slow-run"),
        make_activity("u1", "Ride", km=20, seconds=3600, start=ist(2025, 10, 17, 10, 0), id="a-office-ride"),
        make_activity("u1", "Walk", km=3, seconds=1800, start=ist(2025, 10, 22, 18, 0), id="a-walk"),
        make_activity("u2", "Walk", km=1, seconds=600, start=ist(2025, 10, 19, 8, 0), id="b-walk"),
        make_activity("u3", "Ride", km=30, seconds=3600, start=ist(2025, 10, 18, 7, 0), id="c-ride"),
    ]


class MemoryStore:
    """In-process stand-in for ActivityStore. Activity ids double as tracker ids."""

    def __init__(self, profiles: list[UserProfile], activities: list[Activity]) -> None:
        self.profiles = {p.user_id: p for p in profiles}
        self.activities = {a.id: a for a in activities}
        self.weights: dict[tuple[str, date], float] = {}
        self.reactions: dict[tuple[str, str], str] = {}

    async def list_profiles(self):
        return list(self.profiles.values())

    async def get_profile(self, user_id):
        return self.profiles.get(user_id)

    async def upsert_profile(self, user_id, first_name, last_name, team=None, gender=None):
        current = self.profiles.get(user_id)
        if current is not None:
            team = team if team is not None else current.team
            gender = gender if gender is not None else current.gender
        p = self.profiles[user_id] = UserProfile(
            user_id=user_id, first_name=first_name, last_name=last_name, team=team, gender=gender
        )
        return p

    async def list_activities(self, since=None):
        rows = [
            a for a in self.activities.values()
            if since is None or a.is_valid_locked or (a.start_date is not None and a.start_date >= since)
        ]
        return sorted(rows, key=lambda a: a.start_date, reverse=True)

    async def get_activity(self, activity_id):
        return self.activities.get(activity_id)

    async def activities_by_strava_id(self, user_id):
        return {a.id: a for a in self.activities.values() if a.user_id == user_id}

    async def upsert_activities(self, rows):
        written = 0
        for row in rows:
            current = self.activities.get(row["strava_id"])
            if current is not None and current.is_valid_locked:
                continue
            self.activities[row["strava_id"]] = normalize({**row, "id": row["strava_id"]})
            written += 1
        return written

    async def set_validity(self, activity_id, validity):
        a = self.activities.get(activity_id)
        if a is None:
            return None
        if validity is Validity.AUTO:
            a = replace(a, is_valid_locked=False)
        else:
            a = replace(a, is_valid=validity is Validity.LOCKED_VALID, is_valid_locked=True)
        self.activities[activity_id] = a
        return a

    async def clear_reclassification(self, activity_id):
        a = self.activities.get(activity_id)
        if a is None:
            return None
        a = self.activities[activity_id] = replace(a, derived_type=None)
        return a

    async def upsert_weight(self, user_id, day, weight):
        self.weights[(user_id, day)] = weight
        return WeightEntry(date=day, weight=weight)

    async def list_weights(self, user_id):
        return [WeightEntry(date=d, weight=w) for (uid, d), w in sorted(self.weights.items()) if uid == user_id]

    async def get_reaction(self, activity_id, user_id):
        return self.reactions.get((activity_id, user_id))

    async def put_reaction(self, activity_id, user_id, reaction_type):
        self.reactions[(activity_id, user_id)] = reaction_type

    async def delete_reaction(self, activity_id, user_id):
        self.reactions.pop((activity_id, user_id), None)

    async def list_reactions(self, activity_id=None):
        return [(aid, t) for (aid, _), t in self.reactions.items() if activity_id in (None, aid)]


@pytest.fixture
def store(roster, week) -> MemoryStore:
    return MemoryStore(roster, week)


@pytest.fixture
def client(store, config, now):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_challenge_config] = lambda: config
    app.dependency_overrides[get_now] = lambda: now
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
