import uuid
from datetime import datetime, timezone
import pytest
from sqlalchemy.dialects import postgresql
from moveathon.models.activity import Activity as ActivityRow
from moveathon.repository import (
    ActivityStore, _UPSERT_COLUMNS, activities_query, activity_upsert, profile_upsert,
)
from moveathon.services.normalizer import Validity

START = datetime(2025, 10, 1, tzinfo=timezone.utc)


def sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def params(stmt) -> dict:
    return stmt.compile(dialect=postgresql.dialect()).params


class FakeResult:
    def __init__(self, rows):
        self._rows = list(rows)

    def scalars(self):
        return self

    def all(self):
        return list(self._rows)

    def scalar_one_or_none(self):
        return self._rows[0] if self._rows else None


class FakeSession:
    """Records statements; every execute returns the same canned rows."""

    def __init__(self, rows=()):
        self.rows = list(rows)
        self.statements = []
        self.commits = 0

    async def execute(self, stmt, *args, **kwargs):
        self.statements.append(stmt)
        return FakeResult(self.rows)

    async def commit(self):
        self.commits += 1


def _row(**kw) -> ActivityRow:
    values = dict(
        id=uuid.uuid4(), user_id="u1", strava_id="9001", name="Morning Run", type="Run",
        derived_type=None, distance=5000.0, moving_time=1500, start_date=START,
        strava_url=None, manual=False, is_valid=True, is_valid_locked=False,
    )
    values.update(kw)
    return ActivityRow(**values)


def _import_row(strava_id="9001") -> dict:
    return {
        "user_id": "u1", "strava_id": strava_id, "name": "Run", "type": "Run", "derived_type": None,
        "distance": 5000.0, "moving_time": 1500, "start_date": START, "strava_url": None,
        "manual": False, "is_valid": True,
    }


def test_activities_query_keeps_locked_rows_before_cutoff():
    text = sql(activities_query(START))
    assert "activities.start_date >=" in text
    assert "OR activities.is_valid_locked IS true" in text
    assert "ORDER BY activities.start_date DESC" in text


def test_activities_query_without_cutoff():
    assert "WHERE" not in sql(activities_query(None))


def test_activity_upsert_skips_locked_rows():
    text = sql(activity_upsert([_import_row()]))
    assert "ON CONFLICT (strava_id) DO UPDATE SET" in text
    assert "WHERE activities.is_valid_locked IS false" in text
    assert "RETURNING activities.id" in text
    for column in _UPSERT_COLUMNS:
        assert f"excluded.{column}" in text
    # validity lock and ownership are never touched by an import
    assert "is_valid_locked = excluded" not in text
    assert "user_id = excluded" not in text


def test_profile_upsert_keeps_stored_team_when_missing():
    text = sql(profile_upsert({"user_id": "u4", "first_name": "Dev", "last_name": "Menon", "team": None, "gender": None}))
    assert "ON CONFLICT (user_id) DO UPDATE SET" in text
    assert "coalesce(excluded.team, profiles.team)" in text
    assert "coalesce(excluded.gender, profiles.gender)" in text


@pytest.mark.asyncio
async def test_upsert_counts_only_written_rows():
    session = FakeSession(rows=[uuid.uuid4()])
    written = await ActivityStore(session).upsert_activities([_import_row("1"), _import_row("2")])
    assert written == 1
    assert session.commits == 1


@pytest.mark.asyncio
async def test_upsert_nothing():
    session = FakeSession()
    assert await ActivityStore(session).upsert_activities([]) == 0
    assert session.statements == []


@pytest.mark.asyncio
@pytest.mark.parametrize("validity, expected", [
    (Validity.AUTO, {"is_valid_locked": False}),
    (Validity.LOCKED_VALID, {"is_valid": True, "is_valid_locked": True}),
    (Validity.LOCKED_INVALID, {"is_valid": False, "is_valid_locked": True}),
])
async def test_set_validity_writes_flags(validity, expected):
    row = _row(is_valid_locked=validity is not Validity.AUTO)
    session = FakeSession(rows=[row])

    a = await ActivityStore(session).set_validity(str(row.id), validity)

    p = params(session.statements[0])
    assert {k: p[k] for k in ("is_valid", "is_valid_locked") if k in p} == expected
    assert a.id == str(row.id) and a.is_valid_locked is row.is_valid_locked
    assert session.commits == 1


@pytest.mark.asyncio
async def test_clear_reclassification_nulls_derived_type():
    row = _row(derived_type=None)
    session = FakeSession(rows=[row])
    a = await ActivityStore(session).clear_reclassification(str(row.id))
    stmt = session.statements[0]
    assert "SET derived_type=" in sql(stmt)
    assert params(stmt).get("derived_type") is None
    assert a.effective_type == "Run"


@pytest.mark.asyncio
async def test_update_ignores_malformed_ids():
    session = FakeSession()
    store = ActivityStore(session)
    assert await store.set_validity("not-a-uuid", Validity.LOCKED_VALID) is None
    assert await store.get_activity("not-a-uuid") is None
    assert session.statements == []


@pytest.mark.asyncio
async def test_update_unknown_activity():
    session = FakeSession(rows=[])
    assert await ActivityStore(session).set_validity(str(uuid.uuid4()), Validity.AUTO) is None
