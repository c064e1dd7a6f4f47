from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Union
from habit_hub.core.deps import get_habit_store
from habit_hub.services import habit_service
from habit_hub.services.habit_progress import dashboard_summary
from habit_hub.services.habit_service import HabitView
from habit_hub.services.habit_store import HabitStore
from habit_hub.services.habit_types import HabitFrequency, HabitType
from habit_hub.tools.habits import split_options
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


class HabitCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    type: HabitType
    frequency: HabitFrequency
    goal: str = Field(..., min_length=1)
    icon: str = "Target"
    options: Optional[str] = None
    category_id: Optional[str] = None


class HabitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[HabitType] = None
    frequency: Optional[HabitFrequency] = None
    goal: Optional[str] = Field(None, min_length=1)
    icon: Optional[str] = None
    options: Optional[str] = None
    category_id: Optional[str] = None


class ReportCreate(BaseModel):
    # Omitted for boolean habits, which a bare report marks as done
    value: Optional[Union[bool, float, str]] = None


class HabitsResponse(BaseModel):
    habits: List[HabitView]
    summary: Dict[str, int]


def _check_category(store: HabitStore, category_id: Optional[str]) -> None:
    if category_id and store.get_category(category_id) is None:
        raise HTTPException(status_code=400, detail="Unknown category")


@router.get("/", response_model=HabitsResponse)
async def list_habits(store: HabitStore = Depends(get_habit_store)):
    """All habits with progress for their current day or week"""
    habits = habit_service.get_habits_with_progress(store)
    return HabitsResponse(habits=habits, summary=dashboard_summary(habits))


@router.post("/", response_model=HabitView, status_code=status.HTTP_201_CREATED)
async def create_habit(habit_data: HabitCreate, store: HabitStore = Depends(get_habit_store)):
    """Create a new habit"""
    _check_category(store, habit_data.category_id)
    habit_id = habit_service.create_habit(store, habit_data.model_dump(mode="json", exclude_none=True))
    return habit_service.get_habit_with_progress(store, habit_id)


@router.get("/{habit_id}", response_model=HabitView)
async def get_habit(habit_id: str, store: HabitStore = Depends(get_habit_store)):
    """Get a habit with its current progress"""
    return habit_service.get_habit_with_progress(store, habit_id)


@router.patch("/{habit_id}", response_model=HabitView)
async def update_habit(habit_id: str, habit_update: HabitUpdate, store: HabitStore = Depends(get_habit_store)):
    """Update the given fields of a habit"""
    _check_category(store, habit_update.category_id)
    habit_service.update_habit(store, habit_id, habit_update.model_dump(mode="json", exclude_none=True))
    return habit_service.get_habit_with_progress(store, habit_id)


@router.delete("/{habit_id}")
async def delete_habit(habit_id: str, store: HabitStore = Depends(get_habit_store)):
    """Delete a habit and its reports"""
    store.delete_habit(habit_id)
    return {"message": "Habit deleted successfully"}


@router.post("/{habit_id}/reports", response_model=HabitView, status_code=status.HTTP_201_CREATED)
async def report_progress(habit_id: str, report: ReportCreate, store: HabitStore = Depends(get_habit_store)):
    """Log progress; the report time is set by the server"""
    habit = store.require_habit(habit_id)

    value = report.value
    if value is None:
        if habit.type != HabitType.BOOLEAN.value:
            raise HTTPException(status_code=400, detail=f"A value is required for {habit.type} habits")
        value = True

    if habit.type == HabitType.OPTIONS.value:
        options = split_options(habit.options)
        if options and str(value) not in options:
            raise HTTPException(status_code=400, detail=f"Value must be one of: {', '.join(options)}")

    habit_service.record_manual_report(store, habit, value)
    return habit_service.get_habit_with_progress(store, habit_id)


@router.delete("/{habit_id}/reports/current")
async def reset_current_period(habit_id: str, store: HabitStore = Depends(get_habit_store)):
    """Restart the habit's current day or week"""
    deleted = habit_service.reset_current_period(store, habit_id)
    return {"deleted": deleted}
