from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, StrictInt, StrictStr
from sqlalchemy.orm import Session
from typing import Optional, Union

from auth import get_current_user
from database import get_db
from services.habit_log_service import HabitLogService, InvalidDateError
from services.serializers import log_to_dict

router = APIRouter(prefix="/api/v1/logs", tags=["Logs"])

class ToggleRequest(BaseModel):
    habitId: Optional[Union[StrictInt, StrictStr]] = None
    date: Optional[str] = None

@router.get("")
def list_logs(start: Optional[str] = None, end: Optional[str] = None,
              user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """All HabitLog rows for the signed-in user within [start, end] inclusive."""
    if not start or not end:
        raise HTTPException(status_code=400, detail="Missing start or end query param (YYYY-MM-DD)")
    try:
        logs = HabitLogService.list_in_range(db, user_id, start, end)
    except InvalidDateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"logs": [log_to_dict(l) for l in logs]}

@router.post("/toggle")
def toggle_log(body: ToggleRequest, user_id: int = Depends(get_current_user),
               db: Session = Depends(get_db)):
    """Creates the day's log as completed if missing, otherwise flips it."""
    habit_id = "" if body.habitId is None else str(body.habitId).strip()
    date_str = (body.date or "").strip()
    if not habit_id or not date_str:
        raise HTTPException(status_code=400, detail="habitId and date are required")

    try:
        log = HabitLogService.toggle(db, user_id, habit_id, date_str)
    except InvalidDateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if log is None:
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"log": log_to_dict(log)}
