"""Sleep log service: user check → validate → persist, and the read paths.

Every entry point returns its result or a SleepServiceError; domain
failures are never raised. Validation fully precedes the write, and a
constraint violation on save (e.g. a concurrent insert for the same date)
is reported as an integrity failure without retrying.
"""

from datetime import date, datetime

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.metrics import (
    sleep_log_rejections_total,
    sleep_logs_created_total,
    stats_window_records,
)
from sleeplog.domain.errors import SleepServiceError
from sleeplog.domain.models import Feeling, SleepRecord, StatsSummary
from sleeplog.domain.stats import summarize, thirty_day_window
from sleeplog.domain.validation import ensure_unique, normalize_session
from sleeplog.repository import SleepLogRepository, UserRepository

logger = structlog.get_logger()


class SleepLogService:
    def __init__(self, sleep_logs: SleepLogRepository, users: UserRepository):
        self.sleep_logs = sleep_logs
        self.users = users

    @classmethod
    def from_session(cls, session: AsyncSession) -> "SleepLogService":
        return cls(SleepLogRepository(session), UserRepository(session))

    async def _missing_user(self, user_id: int) -> SleepServiceError | None:
        if await self.users.exists(user_id):
            return None
        return SleepServiceError.not_found(f"User with ID {user_id} not found.")

    def _reject(self, user_id: int, error: SleepServiceError) -> SleepServiceError:
        sleep_log_rejections_total.labels(kind=error.kind.value).inc()
        logger.warning(
            "sleep_log_rejected",
            user_id=user_id,
            kind=error.kind.value,
            reason=error.message,
        )
        return error

    async def create_session(
        self,
        user_id: int,
        start: datetime,
        end: datetime,
        feeling: Feeling,
    ) -> SleepRecord | SleepServiceError:
        """Validate a submitted session and persist it.

        Steps:
        1. User must exist
        2. Normalize the session (ordering, duration, sleep date)
        3. Reject if the user already has a log for that sleep date
        4. Save; a constraint violation becomes an integrity failure
        """
        if error := await self._missing_user(user_id):
            return self._reject(user_id, error)

        candidate = normalize_session(user_id, start, end, feeling)
        if isinstance(candidate, SleepServiceError):
            return self._reject(user_id, candidate)

        taken = await self.sleep_logs.exists(user_id, candidate.sleep_date)
        candidate = ensure_unique(candidate, taken)
        if isinstance(candidate, SleepServiceError):
            return self._reject(user_id, candidate)

        try:
            saved = await self.sleep_logs.save(candidate)
        except IntegrityError:
            logger.exception(
                "sleep_log_save_failed",
                user_id=user_id,
                sleep_date=candidate.sleep_date.isoformat(),
            )
            return self._reject(
                user_id,
                SleepServiceError.integrity_failure(
                    "Failed to save sleep log due to a data integrity issue."
                ),
            )

        sleep_logs_created_total.inc()
        logger.info(
            "sleep_log_created",
            user_id=user_id,
            sleep_log_id=saved.id,
            sleep_date=saved.sleep_date.isoformat(),
            total_minutes=saved.total_minutes,
        )
        return saved

    async def last_session(self, user_id: int) -> SleepRecord | SleepServiceError:
        """The user's most recent sleep log by sleep date."""
        if error := await self._missing_user(user_id):
            return error

        record = await self.sleep_logs.most_recent(user_id)
        if record is None:
            return SleepServiceError.not_found(f"No sleep logs found for user {user_id}.")
        return record

    async def stats_window(
        self, user_id: int, start_date: date, end_date: date
    ) -> StatsSummary | SleepServiceError:
        """Statistics over sleep logs dated start_date..end_date inclusive."""
        if error := await self._missing_user(user_id):
            return error

        records = await self.sleep_logs.find_in_range(user_id, start_date, end_date)
        stats_window_records.observe(len(records))
        return summarize(records, start_date, end_date)

    async def thirty_day_stats(
        self, user_id: int, today: date | None = None
    ) -> StatsSummary | SleepServiceError:
        """Statistics for the 30 days ending today (UTC)."""
        start_date, end_date = thirty_day_window(today)
        return await self.stats_window(user_id, start_date, end_date)
