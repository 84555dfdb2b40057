"""Sleep log and user repositories: all DB access for the sleep log domain.

Repositories translate between ORM rows and canonical SleepRecord values.
Constraint violations on save are rolled back and re-raised as
sqlalchemy IntegrityError for the service to classify.
"""

from datetime import date

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sleeplog.domain.models import Feeling, SleepRecord
from sleeplog.domain.orm import SleepLogModel, UserModel


def _to_record(row: SleepLogModel) -> SleepRecord:
    return SleepRecord(
        id=row.id,
        user_id=row.user_id,
        sleep_date=row.sleep_date,
        time_in_bed_start=row.time_in_bed_start,
        time_in_bed_end=row.time_in_bed_end,
        total_minutes=row.total_time_in_bed_minutes,
        morning_feeling=Feeling(row.morning_feeling),
    )


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def exists(self, user_id: int) -> bool:
        result = await self.session.execute(select(exists().where(UserModel.id == user_id)))
        return bool(result.scalar())

    async def create(self) -> int:
        """Insert a new user and return its id."""
        user = UserModel()
        self.session.add(user)
        await self.session.flush()
        user_id = user.id
        await self.session.commit()
        return user_id


class SleepLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def exists(self, user_id: int, sleep_date: date) -> bool:
        """Whether the user already has a sleep log attributed to `sleep_date`."""
        query = select(
            exists().where(
                SleepLogModel.user_id == user_id,
                SleepLogModel.sleep_date == sleep_date,
            )
        )
        result = await self.session.execute(query)
        return bool(result.scalar())

    async def save(self, record: SleepRecord) -> SleepRecord:
        """Insert a new sleep log and return it with the store-assigned id.

        Raises IntegrityError (after rolling back) when a constraint rejects
        the row, e.g. a concurrent insert for the same (user, date).
        """
        row = SleepLogModel(
            user_id=record.user_id,
            sleep_date=record.sleep_date,
            time_in_bed_start=record.time_in_bed_start,
            time_in_bed_end=record.time_in_bed_end,
            total_time_in_bed_minutes=record.total_minutes,
            morning_feeling=record.morning_feeling.value,
        )
        self.session.add(row)
        try:
            await self.session.flush()
            log_id = row.id
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise
        return record.model_copy(update={"id": log_id})

    async def most_recent(self, user_id: int) -> SleepRecord | None:
        """The user's sleep log with the latest sleep date, if any."""
        query = (
            select(SleepLogModel)
            .where(SleepLogModel.user_id == user_id)
            .order_by(SleepLogModel.sleep_date.desc())
            .limit(1)
        )
        result = await self.session.execute(query)
        row = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def find_in_range(self, user_id: int, start: date, end: date) -> list[SleepRecord]:
        """Sleep logs with start <= sleep_date <= end, oldest first."""
        query = (
            select(SleepLogModel)
            .where(SleepLogModel.user_id == user_id)
            .where(SleepLogModel.sleep_date >= start)
            .where(SleepLogModel.sleep_date <= end)
            .order_by(SleepLogModel.sleep_date.asc())
        )
        result = await self.session.execute(query)
        return [_to_record(row) for row in result.scalars().all()]
