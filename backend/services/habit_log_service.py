"""
habit_log_service.py — Daily completion records
Each (habit, day) pair has at most one row. Days are stored as UTC midnight
so range queries and toggles agree on the key.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.habit import Habit
from models.habit_log import HabitLog

logger = logging.getLogger(__name__)

DAY_FORMAT = "%Y-%m-%d"
# Habit.id is a 32-bit INTEGER column
MAX_HABIT_ID = 2**31 - 1


class InvalidDateError(ValueError):
    """Raised for a day string that is not a real YYYY-MM-DD date."""


def parse_day(value) -> datetime:
    """Parse 'YYYY-MM-DD' into a naive datetime at UTC midnight."""
    if not isinstance(value, str) or len(value) != 10:
        raise InvalidDateError("Invalid date format. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value, DAY_FORMAT)
    except ValueError:
        raise InvalidDateError("Invalid date format. Use YYYY-MM-DD") from None


def day_bounds(start: str, end: str) -> tuple[datetime, datetime]:
    """Inclusive window from start 00:00:00.000 to end 23:59:59.999."""
    start_at = parse_day(start)
    end_at = parse_day(end) + timedelta(days=1) - timedelta(milliseconds=1)
    return start_at, end_at


class HabitLogService:
    @staticmethod
    def list_in_range(db: Session, user_id: int, start: str, end: str) -> list[HabitLog]:
        start_at, end_at = day_bounds(start, end)
        if end_at < start_at:
            return []
        return (
            db.query(HabitLog)
            .filter(
                HabitLog.user_id == user_id,
                HabitLog.date >= start_at,
                HabitLog.date <= end_at,
            )
            .order_by(HabitLog.date.asc(), HabitLog.habit_id.asc())
            .all()
        )

    @staticmethod
    def get_owned_habit(db: Session, user_id: int, habit_id) -> Habit | None:
        try:
            habit_id = int(habit_id)
        except (TypeError, ValueError):
            return None
        if not 1 <= habit_id <= MAX_HABIT_ID:
            return None
        return db.query(Habit).filter_by(id=habit_id, user_id=user_id).first()

    @staticmethod
    def _find_log(db: Session, habit_id: int, day: datetime) -> HabitLog | None:
        return (
            db.query(HabitLog)
            .filter_by(habit_id=habit_id, date=day)
            .with_for_update()
            .first()
        )

    @staticmethod
    def _flip(db: Session, log: HabitLog) -> HabitLog:
        log.completed = not log.completed
        db.commit()
        db.refresh(log)
        return log

    @staticmethod
    def toggle(db: Session, user_id: int, habit_id, date_str: str) -> HabitLog | None:
        """
        Absent -> completed=True; present -> flip completed.
        Returns None when the habit is not owned by the user.
        """
        day = parse_day(date_str)
        habit = HabitLogService.get_owned_habit(db, user_id, habit_id)
        if habit is None:
            return None
        hid = habit.id

        try:
            existing = HabitLogService._find_log(db, hid, day)
            if existing is not None:
                return HabitLogService._flip(db, existing)

            log = HabitLog(user_id=user_id, habit_id=hid, date=day, completed=True)
            db.add(log)
            db.commit()
            db.refresh(log)
            return log
        except IntegrityError:
            # A concurrent toggle created the row first; flip the winner's row
            db.rollback()
            logger.info(f"Toggle conflict on habit {hid} for {date_str}, re-reading")
        except Exception:
            db.rollback()
            raise

        try:
            existing = HabitLogService._find_log(db, hid, day)
            if existing is None:
                raise RuntimeError(f"Log for habit {hid} on {date_str} vanished after conflict")
            return HabitLogService._flip(db, existing)
        except Exception:
            db.rollback()
            raise
