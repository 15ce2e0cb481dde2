from __future__ import annotations
from collections import Counter
from typing import Iterable

REACTION_TYPES = ("like", "love", "fire")


def toggle(current: str | None, requested: str) -> str:
    """
    What a click on `requested` does, given the user's current reaction.

    One reaction per user per activity: clicking the same one again removes
    it, clicking another one switches to it.

    >>> toggle(None, "like"), toggle("like", "like"), toggle("like", "fire")
    ('inserted', 'removed', 'updated')
    """
    if current is None:
        return "inserted"
    if current == requested:
        return "removed"
    return "updated"


def count_reactions(rows: Iterable[tuple[str, str]]) -> list[dict]:
    """Flatten (activity_id, reaction_type) pairs into per-activity counts, zeros included."""
    per_activity: dict[str, Counter] = {}
    for activity_id, reaction_type in rows:
        if reaction_type not in REACTION_TYPES:
            continue
        per_activity.setdefault(activity_id, Counter())[reaction_type] += 1
    return [
        {"activity_id": activity_id, "reaction_type": t, "count": counts[t]}
        for activity_id, counts in per_activity.items()
        for t in REACTION_TYPES
    ]
