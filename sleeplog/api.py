"""FastAPI router for the Sleep Log domain.

Endpoints:
- POST /api/v1/users/{user_id}/sleep-logs
- GET  /api/v1/users/{user_id}/sleep-logs/last-night
- GET  /api/v1/users/{user_id}/sleep-logs/stats
"""

import time
from datetime import UTC, date, datetime
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, Query
from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config import settings
from shared.database import get_session
from shared.exceptions import (
    DuplicateResourceError,
    IncompleteDateRangeError,
    InvalidDateRangeError,
    InvalidInputError,
    NotFoundError,
    ProblemDetailError,
    SleepServiceFailureError,
)
from shared.metrics import api_requests_total, api_response_duration_seconds
from shared.middleware import request_id_var
from sleeplog.domain.errors import ErrorKind, SleepServiceError
from sleeplog.domain.models import Feeling, SleepRecord, StatsSummary
from sleeplog.service import SleepLogService

router = APIRouter(prefix="/api/v1")


# --- Request models ---


class SleepLogRequest(BaseModel):
    """Request body for creating a sleep log."""

    model_config = ConfigDict(populate_by_name=True)

    time_in_bed_start: AwareDatetime = Field(..., alias="timeInBedStart")
    time_in_bed_end: AwareDatetime = Field(..., alias="timeInBedEnd")
    morning_feeling: Feeling = Field(..., alias="morningFeeling")


# --- Dependencies ---


async def get_service(session: AsyncSession = Depends(get_session)) -> SleepLogService:
    return SleepLogService.from_session(session)


# --- Response helpers ---


_PROBLEMS: dict[ErrorKind, type[ProblemDetailError]] = {
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.INVALID_INPUT: InvalidInputError,
    ErrorKind.DUPLICATE_RESOURCE: DuplicateResourceError,
}


def _reject(problem: ProblemDetailError, endpoint: str, method: str) -> NoReturn:
    api_requests_total.labels(
        endpoint=endpoint, method=method, status_code=str(problem.status)
    ).inc()
    raise problem


def _raise_problem(error: SleepServiceError, endpoint: str, method: str) -> NoReturn:
    if error.kind == ErrorKind.INTEGRITY_FAILURE:
        _reject(SleepServiceFailureError(), endpoint, method)
    _reject(_PROBLEMS[error.kind](error.message), endpoint, method)


def _meta() -> dict[str, Any]:
    return {
        "request_id": request_id_var.get(""),
        "timestamp": datetime.now(UTC).isoformat(),
        "api_version": settings.api_version,
    }


def _record_to_dict(record: SleepRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "sleepDate": record.sleep_date.isoformat(),
        "timeInBedStart": record.time_in_bed_start.isoformat(),
        "timeInBedEnd": record.time_in_bed_end.isoformat(),
        "totalTimeInBedMinutes": record.total_minutes,
        "morningFeeling": record.morning_feeling.value,
    }


def _stats_to_dict(summary: StatsSummary) -> dict[str, Any]:
    def _clock(value):
        return value.isoformat() if value is not None else None

    return {
        "startDate": summary.start_date.isoformat(),
        "endDate": summary.end_date.isoformat(),
        "numberOfLogs": summary.count,
        "averageTimeInBedMinutes": summary.average_minutes,
        "averageBedTime": _clock(summary.average_bed_time),
        "averageWakeTime": _clock(summary.average_wake_time),
        "feelingFrequencies": {
            feeling.value: count for feeling, count in summary.feeling_frequencies.items()
        },
    }


# --- Endpoints ---


@router.post("/users/{user_id}/sleep-logs", status_code=201)
async def create_sleep_log(
    user_id: int,
    body: SleepLogRequest,
    service: SleepLogService = Depends(get_service),
):
    """Record last night's sleep for a user.

    The log is attributed to the UTC date of timeInBedEnd.

    HTTP status codes:
    - 201: sleep log created
    - 400: end not after start, or time in bed outside 1 minute to 24 hours
    - 404: unknown user
    - 409: a sleep log already exists for the derived date
    - 422: malformed body (missing field, unknown morningFeeling, timestamp
      without an offset). Shape errors are always 422, never 400; 400 is
      reserved for sessions the validator rejects.
    """
    start_time = time.monotonic()
    result = await service.create_session(
        user_id, body.time_in_bed_start, body.time_in_bed_end, body.morning_feeling
    )
    if isinstance(result, SleepServiceError):
        _raise_problem(result, "create_sleep_log", "POST")

    duration = time.monotonic() - start_time
    api_requests_total.labels(endpoint="create_sleep_log", method="POST", status_code="201").inc()
    api_response_duration_seconds.labels(endpoint="create_sleep_log").observe(duration)

    return {"data": _record_to_dict(result), "meta": _meta()}


@router.get("/users/{user_id}/sleep-logs/last-night")
async def get_last_night(
    user_id: int,
    service: SleepLogService = Depends(get_service),
):
    """Get the user's most recent sleep log."""
    start_time = time.monotonic()
    result = await service.last_session(user_id)
    if isinstance(result, SleepServiceError):
        _raise_problem(result, "last_night", "GET")

    duration = time.monotonic() - start_time
    api_requests_total.labels(endpoint="last_night", method="GET", status_code="200").inc()
    api_response_duration_seconds.labels(endpoint="last_night").observe(duration)

    return {"data": _record_to_dict(result), "meta": _meta()}


@router.get("/users/{user_id}/sleep-logs/stats")
async def get_stats(
    user_id: int,
    service: SleepLogService = Depends(get_service),
    start: date | None = Query(None),
    end: date | None = Query(None),
):
    """Get sleep statistics over an inclusive date window.

    Without start/end the window is the last 30 days ending today (UTC).
    """
    start_time = time.monotonic()
    if (start is None) != (end is None):
        _reject(IncompleteDateRangeError(), "stats", "GET")
    if start is None:
        result = await service.thirty_day_stats(user_id)
    elif start > end:
        _reject(InvalidDateRangeError(str(start), str(end)), "stats", "GET")
    else:
        result = await service.stats_window(user_id, start, end)

    if isinstance(result, SleepServiceError):
        _raise_problem(result, "stats", "GET")

    duration = time.monotonic() - start_time
    api_requests_total.labels(endpoint="stats", method="GET", status_code="200").inc()
    api_response_duration_seconds.labels(endpoint="stats").observe(duration)

    return {"data": _stats_to_dict(result), "meta": _meta()}
