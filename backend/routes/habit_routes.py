from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import get_current_user
from database import get_db
from services.habit_service import HabitService, HabitValidationError
from services.serializers import habit_to_dict

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])

class HabitCreate(BaseModel):
    name: Optional[str] = None

@router.get("")
def list_habits(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Returns habits for the current user: active first, then sort order, then creation time."""
    habits = HabitService.list_for_user(db, user_id)
    return {"habits": [habit_to_dict(h) for h in habits]}

@router.post("", status_code=201)
def create_habit(habit_data: HabitCreate, user_id: int = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    try:
        habit = HabitService.create(db, user_id, habit_data.name)
    except HabitValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"habit": habit_to_dict(habit)}
