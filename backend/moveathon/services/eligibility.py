from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from moveathon.schemas.challenge import ChallengeConfig
from moveathon.services.normalizer import Activity, Validity
from moveathon.services.time_windows import civil_date, is_weekend, local_window_to_utc


class Reason(str, Enum):
    LOCKED_VALID = "locked_valid"
    LOCKED_INVALID = "locked_invalid"
    MANUAL = "manual"
    MISSING_START = "missing_start"
    BEFORE_CHALLENGE = "before_challenge"
    BEFORE_EXCLUSION_WINDOW = "before_exclusion_window"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"
    WORK_HOURS = "work_hours"
    OUTSIDE_WORK_HOURS = "outside_work_hours"


@dataclass(frozen=True, slots=True)
class Verdict:
    eligible: bool
    reason: Reason


def overlaps_work_hours(activity: Activity, config: ChallengeConfig) -> bool:
    """True when [start, end] touches the civil work window of the start date (closed bounds)."""
    start, end = activity.start_date, activity.end_date
    day = civil_date(start, config.time_zone)
    work_start, work_end = local_window_to_utc(day, config.work_hours.start, config.work_hours.end, config.time_zone)
    return start <= work_end and end >= work_start


def evaluate(activity: Activity, config: ChallengeConfig, now: datetime) -> Verdict:
    """Decide whether an activity counts, and why. First matching rule wins."""
    # An administrator lock is authoritative over every automated rule
    validity = activity.validity
    if validity is Validity.LOCKED_VALID:
        return Verdict(True, Reason.LOCKED_VALID)
    if validity is Validity.LOCKED_INVALID:
        return Verdict(False, Reason.LOCKED_INVALID)

    if activity.manual:
        return Verdict(False, Reason.MANUAL)
    start = activity.start_date
    if start is None:
        return Verdict(False, Reason.MISSING_START)

    # Before the challenge opens every activity passes the cutoff (testing mode)
    if now >= config.challenge_start and start < config.challenge_start:
        return Verdict(False, Reason.BEFORE_CHALLENGE)

    if config.exclusion_window_start is not None and start < config.exclusion_window_start:
        return Verdict(True, Reason.BEFORE_EXCLUSION_WINDOW)

    day = civil_date(start, config.time_zone)
    if is_weekend(day):
        return Verdict(True, Reason.WEEKEND)
    if day in config.holidays:
        return Verdict(True, Reason.HOLIDAY)

    if overlaps_work_hours(activity, config):
        return Verdict(False, Reason.WORK_HOURS)
    return Verdict(True, Reason.OUTSIDE_WORK_HOURS)


def is_eligible(activity: Activity, config: ChallengeConfig, now: datetime) -> bool:
    return evaluate(activity, config, now).eligible
