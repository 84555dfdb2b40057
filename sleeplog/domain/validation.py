"""Validation rules for a submitted sleep session.

Turns a raw (start, end, feeling) triple into a canonical SleepRecord or a
SleepServiceError. Checks run in a fixed order and stop at the first failure:

1. Timestamps carry a timezone
2. End strictly after start
3. Whole-minute duration within [1, 1440]
4. Sleep date = UTC date of the end timestamp
5. No record already exists for (user, sleep date)
"""

from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

from sleeplog.domain.errors import SleepServiceError
from sleeplog.domain.models import (
    MAX_SESSION_MINUTES,
    MIN_SESSION_MINUTES,
    Feeling,
    SleepRecord,
)

_ONE_MINUTE = timedelta(minutes=1)


def session_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between start and end; the sub-minute remainder is dropped."""
    return (end - start) // _ONE_MINUTE


def derive_sleep_date(end: datetime) -> date:
    """A session belongs to the UTC date it ended on."""
    return end.astimezone(UTC).date()


def normalize_session(
    user_id: int,
    start: datetime,
    end: datetime,
    feeling: Feeling,
) -> SleepRecord | SleepServiceError:
    """Build the canonical record without consulting the store (rules 1-4)."""
    # Rule 1: Absolute instants only
    if start.tzinfo is None or end.tzinfo is None:
        return SleepServiceError.invalid_input("Time in bed start and end must include a timezone.")

    start = start.astimezone(UTC)
    end = end.astimezone(UTC)

    # Rule 2: Ordering
    if end <= start:
        return SleepServiceError.invalid_input("Time in bed end must be after time in bed start.")

    # Rule 3: Duration range
    minutes = session_minutes(start, end)
    if minutes < MIN_SESSION_MINUTES:
        return SleepServiceError.invalid_input("Total time in bed must be at least 1 minute.")
    if minutes > MAX_SESSION_MINUTES:
        return SleepServiceError.invalid_input("Total time in bed cannot exceed 24 hours.")

    # Rule 4: Attribution date
    return SleepRecord(
        user_id=user_id,
        sleep_date=derive_sleep_date(end),
        time_in_bed_start=start,
        time_in_bed_end=end,
        total_minutes=minutes,
        morning_feeling=feeling,
    )


def ensure_unique(record: SleepRecord, already_recorded: bool) -> SleepRecord | SleepServiceError:
    """Rule 5: at most one record per (user, sleep date)."""
    if already_recorded:
        return SleepServiceError.duplicate(
            f"A sleep log for user {record.user_id} on date "
            f"{record.sleep_date.isoformat()} already exists."
        )
    return record


def validate_session(
    user_id: int,
    start: datetime,
    end: datetime,
    feeling: Feeling,
    date_taken: Callable[[date], bool],
) -> SleepRecord | SleepServiceError:
    """Validate a submission end to end.

    `date_taken` answers whether the user already has a record on a date.
    It is only consulted once rules 1-4 pass.
    """
    candidate = normalize_session(user_id, start, end, feeling)
    if isinstance(candidate, SleepServiceError):
        return candidate
    return ensure_unique(candidate, date_taken(candidate.sleep_date))
