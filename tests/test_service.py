"""Tests for SleepLogService against in-memory stores (no DB)."""

from datetime import UTC, date, datetime, time, timedelta

import pytest

from sleeplog.domain.errors import ErrorKind, SleepServiceError
from sleeplog.domain.models import Feeling, SleepRecord, StatsSummary
from sleeplog.service import SleepLogService
from tests.conftest import UNKNOWN_USER_ID, InMemoryUserStore


def _night(sleep_date: date, bed_hour: int = 23, wake_hour: int = 7):
    """Bed the evening before sleep_date, wake on sleep_date (UTC)."""
    end = datetime(sleep_date.year, sleep_date.month, sleep_date.day, wake_hour, tzinfo=UTC)
    start = datetime.combine(sleep_date - timedelta(days=1), time(bed_hour), tzinfo=UTC)
    return start, end


class TestCreateSession:
    async def test_creates_and_assigns_id(self, service, user_id, overnight_session):
        start, end = overnight_session
        record = await service.create_session(user_id, start, end, Feeling.GOOD)

        assert isinstance(record, SleepRecord)
        assert record.id == 1
        assert record.sleep_date == date(2025, 5, 11)
        assert record.total_minutes == 480

    async def test_unknown_user(self, service, overnight_session):
        start, end = overnight_session
        error = await service.create_session(UNKNOWN_USER_ID, start, end, Feeling.GOOD)

        assert isinstance(error, SleepServiceError)
        assert error.kind == ErrorKind.NOT_FOUND
        assert str(UNKNOWN_USER_ID) in error.message

    async def test_invalid_input_not_saved(self, service, sleep_log_store, user_id, overnight_session):
        start, end = overnight_session
        error = await service.create_session(user_id, end, start, Feeling.GOOD)

        assert error.kind == ErrorKind.INVALID_INPUT
        assert sleep_log_store.rows == {}

    async def test_duplicate_date(self, service, sleep_log_store, user_id, overnight_session):
        start, end = overnight_session
        await service.create_session(user_id, start, end, Feeling.GOOD)

        # Different times, same wake-up date
        error = await service.create_session(
            user_id, start + timedelta(hours=1), end + timedelta(hours=2), Feeling.BAD
        )
        assert error.kind == ErrorKind.DUPLICATE_RESOURCE
        assert len(sleep_log_store.rows) == 1

    async def test_same_date_other_user_allowed(self, sleep_log_store, overnight_session):
        service = SleepLogService(sleep_log_store, InMemoryUserStore({1, 2}))
        start, end = overnight_session

        first = await service.create_session(1, start, end, Feeling.GOOD)
        second = await service.create_session(2, start, end, Feeling.OK)

        assert isinstance(first, SleepRecord)
        assert isinstance(second, SleepRecord)
        assert first.id != second.id

    async def test_integrity_failure_on_save(self, service, sleep_log_store, user_id, overnight_session):
        start, end = overnight_session
        sleep_log_store.fail_next_save = True

        error = await service.create_session(user_id, start, end, Feeling.GOOD)

        assert isinstance(error, SleepServiceError)
        assert error.kind == ErrorKind.INTEGRITY_FAILURE
        assert "uq_sleep_logs_user_date" not in error.message

    async def test_create_then_last_session(self, service, user_id, overnight_session):
        start, end = overnight_session
        created = await service.create_session(user_id, start, end, Feeling.OK)
        last = await service.last_session(user_id)

        assert last.id == created.id
        assert last.sleep_date == created.sleep_date
        assert last.total_minutes == created.total_minutes


class TestLastSession:
    async def test_no_logs_yet(self, service, user_id):
        error = await service.last_session(user_id)
        assert error.kind == ErrorKind.NOT_FOUND
        assert "No sleep logs" in error.message

    async def test_unknown_user(self, service):
        error = await service.last_session(UNKNOWN_USER_ID)
        assert error.kind == ErrorKind.NOT_FOUND
        assert "User" in error.message

    async def test_latest_by_sleep_date(self, service, user_id):
        # Inserted out of order
        for day in (date(2025, 5, 3), date(2025, 5, 9), date(2025, 5, 1)):
            await service.create_session(user_id, *_night(day), Feeling.OK)

        last = await service.last_session(user_id)
        assert last.sleep_date == date(2025, 5, 9)


class TestStats:
    async def test_window_bounds_inclusive(self, service, user_id):
        for day in (date(2025, 4, 30), date(2025, 5, 1), date(2025, 5, 10), date(2025, 5, 11)):
            await service.create_session(user_id, *_night(day), Feeling.GOOD)

        summary = await service.stats_window(user_id, date(2025, 5, 1), date(2025, 5, 10))

        assert isinstance(summary, StatsSummary)
        assert summary.count == 2
        assert summary.start_date == date(2025, 5, 1)
        assert summary.end_date == date(2025, 5, 10)

    async def test_empty_window(self, service, user_id):
        summary = await service.stats_window(user_id, date(2025, 5, 1), date(2025, 5, 30))

        assert summary.count == 0
        assert summary.average_minutes is None
        assert summary.average_bed_time is None
        assert summary.average_wake_time is None
        assert summary.feeling_frequencies == {}
        assert (summary.start_date, summary.end_date) == (date(2025, 5, 1), date(2025, 5, 30))

    async def test_unknown_user(self, service):
        error = await service.stats_window(UNKNOWN_USER_ID, date(2025, 5, 1), date(2025, 5, 30))
        assert error.kind == ErrorKind.NOT_FOUND

    async def test_thirty_day_stats(self, service, user_id):
        today = date(2025, 5, 11)
        await service.create_session(user_id, *_night(today, 22, 6), Feeling.GOOD)
        await service.create_session(user_id, *_night(date(2025, 5, 1), 23, 7), Feeling.GOOD)
        await service.create_session(user_id, *_night(date(2025, 4, 12), 21, 8), Feeling.OK)
        # Day 31: outside the window
        await service.create_session(user_id, *_night(date(2025, 4, 11)), Feeling.BAD)

        summary = await service.thirty_day_stats(user_id, today=today)

        assert summary.start_date == date(2025, 4, 12)
        assert summary.end_date == today
        assert summary.count == 3
        assert summary.average_bed_time == time(22, 0)
        assert summary.average_wake_time == time(7, 0)
        assert summary.feeling_frequencies == {Feeling.GOOD: 2, Feeling.OK: 1}
        assert summary.average_minutes == pytest.approx((480 + 480 + 660) / 3)
