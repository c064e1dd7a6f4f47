from fastapi import APIRouter, Depends, HTTPException, Query
from datetime import date, datetime
from typing import List, Optional
from habit_hub.core.deps import get_habit_store
from habit_hub.services import habit_service
from habit_hub.services.habit_periods import local_timezone
from habit_hub.services.habit_service import HabitHistory
from habit_hub.services.habit_store import HabitStore

router = APIRouter()


def _today() -> date:
    return datetime.now(local_timezone()).date()


@router.get("/week", response_model=List[HabitHistory])
async def week_reports(
    day: Optional[date] = Query(None, alias="date"),
    store: HabitStore = Depends(get_habit_store)
):
    """Every habit with its reports for the Sunday-to-Saturday week containing `date`"""
    return habit_service.get_habits_with_reports_for_week(store, day or _today())


@router.get("/month", response_model=List[HabitHistory])
async def month_reports(
    month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    store: HabitStore = Depends(get_habit_store)
):
    """Habits that have reports in `month` (YYYY-MM), with those reports"""
    if month:
        try:
            day = datetime.strptime(month, "%Y-%m").date()
        except ValueError:
            raise HTTPException(status_code=400, detail="month must be YYYY-MM")
    else:
        day = _today()
    return habit_service.get_habits_with_reports_for_month(store, day)


@router.get("/months", response_model=List[str])
async def report_months(store: HabitStore = Depends(get_habit_store)):
    """Months that have any reports, newest first"""
    return store.report_months()
