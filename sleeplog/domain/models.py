"""Canonical sleep log domain model.

A SleepRecord is one bed-to-wake interval attributed to a single calendar
date. It is built once by the session validator and never mutated; the
store assigns `id` on save.

Design principles:
- Immutable values: records and summaries are frozen models
- Owning id, not a back-reference: `user_id` is a lookup key
- Derived, not supplied: `sleep_date` and `total_minutes` come from the timestamps
"""

from datetime import date, datetime, time
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

MIN_SESSION_MINUTES = 1
MAX_SESSION_MINUTES = 24 * 60


class Feeling(StrEnum):
    BAD = "BAD"
    OK = "OK"
    GOOD = "GOOD"


class SleepRecord(BaseModel):
    """Canonical representation of one sleep session."""

    model_config = ConfigDict(frozen=True)

    # Identity (assigned by the store)
    id: int | None = None
    user_id: int

    # Temporal
    sleep_date: date
    time_in_bed_start: datetime
    time_in_bed_end: datetime

    # Derived
    total_minutes: int = Field(..., ge=MIN_SESSION_MINUTES, le=MAX_SESSION_MINUTES)
    morning_feeling: Feeling


class StatsSummary(BaseModel):
    """Aggregate statistics over an inclusive date window."""

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date
    count: int = Field(..., ge=0)
    average_minutes: float | None = None
    average_bed_time: time | None = None
    average_wake_time: time | None = None
    feeling_frequencies: dict[Feeling, int] = Field(default_factory=dict)
