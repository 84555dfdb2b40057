"""SQLAlchemy ORM models for both tables.

Tables:
- users: account rows that sleep logs hang off
- sleep_logs: one canonical sleep record per user per date
"""

from datetime import UTC, date, datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("now()")
    )


class SleepLogModel(Base):
    __tablename__ = "sleep_logs"

    # Identity
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # Session
    sleep_date: Mapped[date] = mapped_column(Date, nullable=False)
    time_in_bed_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    time_in_bed_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_time_in_bed_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    morning_feeling: Mapped[str] = mapped_column(String(16), nullable=False)

    # Lifecycle
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("now()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
        onupdate=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "sleep_date", name="uq_sleep_logs_user_date"),
        CheckConstraint(
            "total_time_in_bed_minutes >= 1 AND total_time_in_bed_minutes <= 1440",
            name="chk_total_time_in_bed_minutes",
        ),
        CheckConstraint(
            "time_in_bed_end > time_in_bed_start",
            name="chk_time_in_bed_end_after_start",
        ),
        CheckConstraint(
            "morning_feeling IN ('BAD', 'OK', 'GOOD')",
            name="chk_morning_feeling",
        ),
        Index("idx_sleep_logs_user_date", "user_id", sleep_date.desc()),
    )
