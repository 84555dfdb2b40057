"""Rolling sleep statistics.

Reduces a user's records for an inclusive date window into a StatsSummary.
Bed and wake times are averaged on the clock, not the timeline: a plain
mean of 23:30 and 00:30 would land at noon.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, time, timedelta

from sleeplog.domain.models import SleepRecord, StatsSummary

STATS_WINDOW_DAYS = 30
SECONDS_PER_DAY = 24 * 3600

# Bed times before this hour count as late the previous night.
# Policy constant; moving it changes the averages users see.
BED_TIME_PIVOT_HOUR = 4
_BED_TIME_PIVOT_SECONDS = BED_TIME_PIVOT_HOUR * 3600


def thirty_day_window(today: date | None = None) -> tuple[date, date]:
    """The standard window: today and the 29 days before it, in UTC."""
    end = today or datetime.now(UTC).date()
    return end - timedelta(days=STATS_WINDOW_DAYS - 1), end


def _second_of_day(instant: datetime) -> int:
    clock = instant.astimezone(UTC).time() if instant.tzinfo else instant.time()
    return clock.hour * 3600 + clock.minute * 60 + clock.second


def average_time_of_day(instants: Iterable[datetime], is_bed_time: bool) -> time | None:
    """Mean clock time of the given instants (UTC), or None when there are none.

    Bed times before BED_TIME_PIVOT_HOUR are shifted forward a day before
    averaging and the mean is folded back onto the clock. Wake times are
    averaged as-is.
    """
    seconds = []
    for instant in instants:
        value = _second_of_day(instant)
        if is_bed_time and value < _BED_TIME_PIVOT_SECONDS:
            value += SECONDS_PER_DAY
        seconds.append(value)

    if not seconds:
        return None

    average = sum(seconds) // len(seconds)
    if is_bed_time:
        average %= SECONDS_PER_DAY

    hours, remainder = divmod(average, 3600)
    minutes, secs = divmod(remainder, 60)
    return time(hours, minutes, secs)


def summarize(records: Sequence[SleepRecord], start_date: date, end_date: date) -> StatsSummary:
    """Compute count, mean duration, mean bed/wake time and feeling counts."""
    if not records:
        return StatsSummary(start_date=start_date, end_date=end_date, count=0)

    return StatsSummary(
        start_date=start_date,
        end_date=end_date,
        count=len(records),
        average_minutes=sum(r.total_minutes for r in records) / len(records),
        average_bed_time=average_time_of_day(
            (r.time_in_bed_start for r in records), is_bed_time=True
        ),
        average_wake_time=average_time_of_day(
            (r.time_in_bed_end for r in records), is_bed_time=False
        ),
        feeling_frequencies=dict(Counter(r.morning_feeling for r in records)),
    )
