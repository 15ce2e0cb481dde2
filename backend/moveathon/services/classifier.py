from __future__ import annotations
from dataclasses import replace
from moveathon.services.normalizer import Activity, RECLASSIFIED_WALK, RUN_TYPES

DEFAULT_WALK_PACE_THRESHOLD = 8.5  # minutes per km
_MIN_KM = 1e-6


def pace_min_per_km(activity: Activity) -> float:
    return (activity.moving_time / 60) / max(activity.distance_km, _MIN_KM)


def classify(activity: Activity, threshold: float = DEFAULT_WALK_PACE_THRESHOLD) -> str:
    """
    Effective category for scoring. A stored derived_type is sticky and wins;
    otherwise runs at or slower than `threshold` min/km count as walks.
    """
    if activity.derived_type:
        return activity.derived_type
    if activity.type in RUN_TYPES and pace_min_per_km(activity) >= threshold:
        return RECLASSIFIED_WALK
    return activity.type


def with_classification(activity: Activity, threshold: float = DEFAULT_WALK_PACE_THRESHOLD) -> Activity:
    """Return a copy carrying the reclassified category in derived_type, if any."""
    category = classify(activity, threshold)
    if category == activity.type:
        return activity
    return replace(activity, derived_type=category)
