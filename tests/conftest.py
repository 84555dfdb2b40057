"""Shared test fixtures."""

import sys
from datetime import UTC, date, datetime
from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sleeplog.domain.models import Feeling, SleepRecord  # noqa: E402
from sleeplog.service import SleepLogService  # noqa: E402

USER_ID = 42
UNKNOWN_USER_ID = 404


class InMemoryUserStore:
    def __init__(self, user_ids=()):
        self.user_ids = set(user_ids)

    async def exists(self, user_id: int) -> bool:
        return user_id in self.user_ids


class InMemorySleepLogStore:
    """Dict-backed stand-in for SleepLogRepository, keyed by (user_id, sleep_date)."""

    def __init__(self):
        self.rows: dict[tuple[int, date], SleepRecord] = {}
        self.next_id = 1
        self.fail_next_save = False

    async def exists(self, user_id: int, sleep_date: date) -> bool:
        return (user_id, sleep_date) in self.rows

    async def save(self, record: SleepRecord) -> SleepRecord:
        if self.fail_next_save:
            self.fail_next_save = False
            raise IntegrityError(
                "INSERT INTO sleep_logs ...",
                {},
                Exception('duplicate key value violates unique constraint "uq_sleep_logs_user_date"'),
            )
        saved = record.model_copy(update={"id": self.next_id})
        self.next_id += 1
        self.rows[(record.user_id, record.sleep_date)] = saved
        return saved

    async def most_recent(self, user_id: int) -> SleepRecord | None:
        mine = [r for (uid, _), r in self.rows.items() if uid == user_id]
        return max(mine, key=lambda r: r.sleep_date, default=None)

    async def find_in_range(self, user_id: int, start: date, end: date) -> list[SleepRecord]:
        return sorted(
            (
                r
                for (uid, day), r in self.rows.items()
                if uid == user_id and start <= day <= end
            ),
            key=lambda r: r.sleep_date,
        )


def make_record(
    start: datetime,
    end: datetime,
    feeling: Feeling = Feeling.GOOD,
    user_id: int = USER_ID,
    record_id: int | None = None,
) -> SleepRecord:
    return SleepRecord(
        id=record_id,
        user_id=user_id,
        sleep_date=end.astimezone(UTC).date(),
        time_in_bed_start=start,
        time_in_bed_end=end,
        total_minutes=int((end - start).total_seconds() // 60),
        morning_feeling=feeling,
    )


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def sleep_log_store():
    return InMemorySleepLogStore()


@pytest.fixture
def service(sleep_log_store):
    return SleepLogService(sleep_log_store, InMemoryUserStore({USER_ID}))


@pytest.fixture
def overnight_session():
    """23:00 UTC on 2025-05-10 to 07:00 UTC on 2025-05-11 (480 minutes)."""
    return (
        datetime(2025, 5, 10, 23, 0, tzinfo=UTC),
        datetime(2025, 5, 11, 7, 0, tzinfo=UTC),
    )
