"""
habit_service.py — Habit listing and creation
New habits go to the end of the user's active list (max sort order + 1).
"""

import logging

from sqlalchemy.orm import Session
from sqlalchemy import func

from config import HABIT_NAME_MAX_LENGTH
from models.habit import Habit

logger = logging.getLogger(__name__)


class HabitValidationError(ValueError):
    """Raised when habit input fails validation."""


class HabitService:
    @staticmethod
    def list_for_user(db: Session, user_id: int) -> list[Habit]:
        """Active habits first, then manual sort order, then creation time."""
        return (
            db.query(Habit)
            .filter(Habit.user_id == user_id)
            .order_by(Habit.is_archived.asc(), Habit.sort_order.asc(), Habit.created_at.asc())
            .all()
        )

    @staticmethod
    def clean_name(name) -> str:
        name = ("" if name is None else str(name)).strip()
        if not name:
            raise HabitValidationError("Habit name is required")
        if len(name) > HABIT_NAME_MAX_LENGTH:
            raise HabitValidationError(
                f"Habit name must be at most {HABIT_NAME_MAX_LENGTH} characters"
            )
        return name

    @staticmethod
    def next_sort_order(db: Session, user_id: int) -> int:
        current = (
            db.query(func.max(Habit.sort_order))
            .filter(Habit.user_id == user_id, Habit.is_archived.is_(False))
            .scalar()
        )
        return (current or 0) + 1

    @staticmethod
    def create(db: Session, user_id: int, name) -> Habit:
        name = HabitService.clean_name(name)
        try:
            h = Habit(
                user_id=user_id,
                name=name,
                sort_order=HabitService.next_sort_order(db, user_id),
                is_archived=False,
            )
            db.add(h)
            db.commit()
            db.refresh(h)
        except Exception:
            db.rollback()
            raise
        logger.info(f"Created habit {h.id} for user {user_id} at position {h.sort_order}")
        return h
