"""
serializers.py — JSON shapes handed back to the browser client.
Keys are camelCase; datetimes are UTC ISO-8601 with millisecond precision.
"""

from datetime import datetime, timezone

from models.habit import Habit
from models.habit_log import HabitLog
from models.user import User


def iso_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def habit_to_dict(h: Habit) -> dict:
    return {
        "id": h.id,
        "name": h.name,
        "sortOrder": h.sort_order,
        "isArchived": bool(h.is_archived),
        "startDate": iso_utc(h.start_date),
        "endDate": iso_utc(h.end_date),
        "createdAt": iso_utc(h.created_at),
    }


def log_to_dict(log: HabitLog) -> dict:
    return {
        "id": log.id,
        "habitId": log.habit_id,
        "date": iso_utc(log.date),
        "completed": bool(log.completed),
    }


def user_to_dict(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "createdAt": iso_utc(u.created_at),
    }
