"""Postgres-backed reads and writes for profiles, activities, weights and reactions."""
from __future__ import annotations
import datetime as dt
import uuid
from typing import Any, Iterable
from fastapi import Depends
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from moveathon.db import get_session
from moveathon.models.activity import Activity as ActivityRow
from moveathon.models.profile import Profile
from moveathon.models.reaction import ActivityReaction
from moveathon.models.weight import WeightLog
from moveathon.schemas.profile import WeightEntry
from moveathon.services.normalizer import Activity, UserProfile, Validity

# Columns an automated import may rewrite on conflict
_UPSERT_COLUMNS = ("name", "type", "derived_type", "distance", "moving_time", "start_date", "strava_url", "manual", "is_valid")


def to_activity(row: ActivityRow) -> Activity:
    return Activity(
        id=str(row.id),
        user_id=row.user_id,
        type=row.type,
        distance=float(row.distance or 0),
        moving_time=float(row.moving_time or 0),
        start_date=row.start_date,
        manual=bool(row.manual),
        derived_type=row.derived_type,
        is_valid=bool(row.is_valid),
        is_valid_locked=bool(row.is_valid_locked),
        name=row.name,
        strava_url=row.strava_url,
    )


def to_profile(row: Profile) -> UserProfile:
    return UserProfile(
        user_id=row.user_id,
        first_name=row.first_name or "",
        last_name=row.last_name or "",
        team=row.team,
        gender=row.gender,
    )


def _uuid(activity_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(activity_id)
    except ValueError:
        return None


def activities_query(since: dt.datetime | None = None):
    """
    Activities newest first. `since` bounds start_date from below, but locked
    rows are always returned: an admin decision outranks the challenge cutoff.
    """
    q = select(ActivityRow)
    if since is not None:
        q = q.where(or_(ActivityRow.start_date >= since, ActivityRow.is_valid_locked.is_(True)))
    return q.order_by(ActivityRow.start_date.desc())


def activity_upsert(rows: list[dict[str, Any]]):
    stmt = insert(ActivityRow).values(rows)
    return stmt.on_conflict_do_update(
        index_elements=[ActivityRow.strava_id],
        set_={c: stmt.excluded[c] for c in _UPSERT_COLUMNS},
        # Locked rows are never rewritten, even if a stale plan says otherwise
        where=ActivityRow.is_valid_locked.is_(False),
    ).returning(ActivityRow.id)


def profile_upsert(values: dict[str, Any]):
    stmt = insert(Profile).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[Profile.user_id],
        set_={
            "first_name": stmt.excluded.first_name,
            "last_name": stmt.excluded.last_name,
            "team": func.coalesce(stmt.excluded.team, Profile.team),
            "gender": func.coalesce(stmt.excluded.gender, Profile.gender),
        },
    ).returning(Profile)


def weight_upsert(user_id: str, day: dt.date, weight: float):
    stmt = insert(WeightLog).values(user_id=user_id, date=day, weight=weight)
    return stmt.on_conflict_do_update(
        constraint="uq_weight_logs_user_date",
        set_={"weight": stmt.excluded.weight, "updated_at": func.now()},
    )


def reaction_upsert(activity_id: uuid.UUID, user_id: str, reaction_type: str):
    stmt = insert(ActivityReaction).values(activity_id=activity_id, user_id=user_id, reaction_type=reaction_type)
    return stmt.on_conflict_do_update(
        constraint="uq_activity_reactions_activity_user",
        set_={"reaction_type": stmt.excluded.reaction_type},
    )


class ActivityStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # profiles

    async def list_profiles(self) -> list[UserProfile]:
        rows = (await self._session.execute(select(Profile).order_by(Profile.created_at.asc()))).scalars().all()
        return [to_profile(r) for r in rows]

    async def get_profile(self, user_id: str) -> UserProfile | None:
        row = await self._session.get(Profile, user_id)
        return to_profile(row) if row else None

    async def upsert_profile(
        self, user_id: str, first_name: str, last_name: str, team: str | None = None, gender: str | None = None
    ) -> UserProfile:
        """Register or update a participant; a missing team or gender keeps the stored one."""
        res = await self._session.execute(
            profile_upsert(dict(user_id=user_id, first_name=first_name, last_name=last_name, team=team, gender=gender)),
            execution_options={"populate_existing": True},
        )
        row = res.scalar_one()
        await self._session.commit()
        return to_profile(row)

    # activities

    async def list_activities(self, since: dt.datetime | None = None) -> list[Activity]:
        rows = (await self._session.execute(activities_query(since))).scalars().all()
        return [to_activity(r) for r in rows]

    async def get_activity(self, activity_id: str) -> Activity | None:
        key = _uuid(activity_id)
        if key is None:
            return None
        row = await self._session.get(ActivityRow, key)
        return to_activity(row) if row else None

    async def activities_by_strava_id(self, user_id: str) -> dict[str, Activity]:
        rows = (await self._session.execute(
            select(ActivityRow).where(ActivityRow.user_id == user_id)
        )).scalars().all()
        return {r.strava_id: to_activity(r) for r in rows}

    async def upsert_activities(self, rows: Iterable[dict[str, Any]]) -> int:
        """Insert or refresh rows; returns how many were actually written."""
        rows = list(rows)
        if not rows:
            return 0
        res = await self._session.execute(activity_upsert(rows))
        written = len(res.scalars().all())
        await self._session.commit()
        return written

    async def _update(self, activity_id: str, **values) -> Activity | None:
        key = _uuid(activity_id)
        if key is None:
            return None
        res = await self._session.execute(
            update(ActivityRow).where(ActivityRow.id == key).values(**values).returning(ActivityRow)
        )
        row = res.scalar_one_or_none()
        await self._session.commit()
        return to_activity(row) if row else None

    async def set_validity(self, activity_id: str, validity: Validity) -> Activity | None:
        if validity is Validity.AUTO:
            return await self._update(activity_id, is_valid_locked=False)
        return await self._update(
            activity_id, is_valid=validity is Validity.LOCKED_VALID, is_valid_locked=True
        )

    async def clear_reclassification(self, activity_id: str) -> Activity | None:
        return await self._update(activity_id, derived_type=None)

    # weights

    async def upsert_weight(self, user_id: str, day: dt.date, weight: float) -> WeightEntry:
        await self._session.execute(weight_upsert(user_id, day, weight))
        await self._session.commit()
        return WeightEntry(date=day, weight=weight)

    async def list_weights(self, user_id: str) -> list[WeightEntry]:
        rows = (await self._session.execute(
            select(WeightLog.date, WeightLog.weight).where(WeightLog.user_id == user_id).order_by(WeightLog.date.asc())
        )).all()
        return [WeightEntry(date=d, weight=w) for d, w in rows]

    # reactions

    async def get_reaction(self, activity_id: str, user_id: str) -> str | None:
        key = _uuid(activity_id)
        if key is None:
            return None
        return (await self._session.execute(
            select(ActivityReaction.reaction_type).where(
                ActivityReaction.activity_id == key, ActivityReaction.user_id == user_id
            )
        )).scalar_one_or_none()

    async def put_reaction(self, activity_id: str, user_id: str, reaction_type: str) -> None:
        await self._session.execute(reaction_upsert(uuid.UUID(activity_id), user_id, reaction_type))
        await self._session.commit()

    async def delete_reaction(self, activity_id: str, user_id: str) -> None:
        await self._session.execute(
            delete(ActivityReaction).where(
                ActivityReaction.activity_id == uuid.UUID(activity_id), ActivityReaction.user_id == user_id
            )
        )
        await self._session.commit()

    async def list_reactions(self, activity_id: str | None = None) -> list[tuple[str, str]]:
        q = select(ActivityReaction.activity_id, ActivityReaction.reaction_type)
        if activity_id is not None:
            key = _uuid(activity_id)
            if key is None:
                return []
            q = q.where(ActivityReaction.activity_id == key)
        return [(str(a), t) for a, t in (await self._session.execute(q)).all()]


async def get_store(session: AsyncSession = Depends(get_session)) -> ActivityStore:
    return ActivityStore(session)
