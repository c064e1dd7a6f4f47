"""
Habit Service - habits with derived progress, report history views and writes
"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

from pydantic import BaseModel

from habit_hub.models.habit import Habit, HabitReport
from habit_hub.services.duration import normalize_duration_goal, parse_duration
from habit_hub.services.habit_periods import as_utc, month_bounds, period_start, week_bounds
from habit_hub.services.habit_progress import HabitProgressCalculator, ReportEntry
from habit_hub.services.habit_store import HabitStore
from habit_hub.services.habit_types import HabitType
from habit_hub.services.report_values import (
    ReportValue, dump_report_value, load_report_value, normalize_report_value, parse_number
)

logger = logging.getLogger(__name__)


class ReportView(BaseModel):
    id: str
    value: ReportValue
    reported_at: datetime


class HabitHistory(BaseModel):
    id: str
    name: str
    description: str
    type: HabitType
    frequency: str
    goal: str
    icon: str
    options: Optional[str] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    reports: List[ReportView] = []


class HabitView(HabitHistory):
    """A habit with its progress for the current period, computed on read"""
    progress: Union[int, float] = 0
    target: int = 1
    completed: bool = False
    last_reported_value: Optional[str] = None
    progress_percentage: float = 0.0
    status_text: str = ""


def _entries(habit: Habit, rows: List[HabitReport]) -> List[ReportEntry]:
    return [
        ReportEntry(
            id=row.id,
            value=load_report_value(habit.type, row.value),
            reported_at=as_utc(row.reported_at),
        )
        for row in rows
    ]


def _category_names(store: HabitStore) -> Dict[str, str]:
    return {c.id: c.name for c in store.list_categories()}


def _history(habit: Habit, entries: List[ReportEntry], categories: Dict[str, str]) -> Dict[str, Any]:
    return dict(
        id=habit.id,
        name=habit.name,
        description=habit.description or "",
        type=habit.type,
        frequency=habit.frequency,
        goal=habit.goal or "",
        icon=habit.icon,
        options=habit.options,
        category_id=habit.category_id,
        # A dangling category_id reads as uncategorized
        category_name=categories.get(habit.category_id) if habit.category_id else None,
        reports=[ReportView(id=e.id, value=e.value, reported_at=e.reported_at) for e in entries],
    )


def build_habit_view(habit: Habit, entries: List[ReportEntry], categories: Dict[str, str]) -> HabitView:
    result = HabitProgressCalculator.evaluate(habit.type, habit.goal, entries)
    return HabitView(
        **_history(habit, entries, categories),
        progress=result.progress,
        target=result.target,
        completed=result.completed,
        last_reported_value=result.last_reported_value,
        progress_percentage=HabitProgressCalculator.progress_percentage(habit.type, habit.goal, result.progress),
        status_text=HabitProgressCalculator.status_text(
            habit.type, habit.goal, result.progress, result.completed, result.last_reported_value
        ),
    )


def _current_view(store: HabitStore, habit: Habit, categories: Dict[str, str], now: Optional[datetime]) -> HabitView:
    window_start = period_start(habit.frequency, now)
    rows = store.list_reports(habit.id, since=window_start)
    return build_habit_view(habit, _entries(habit, rows), categories)


def get_habits_with_progress(store: HabitStore, now: Optional[datetime] = None) -> List[HabitView]:
    """Every habit with progress recomputed from its current-period reports"""
    categories = _category_names(store)
    return [_current_view(store, habit, categories, now) for habit in store.list_habits()]


def get_habit_with_progress(store: HabitStore, habit_id: str, now: Optional[datetime] = None) -> HabitView:
    habit = store.require_habit(habit_id)
    return _current_view(store, habit, _category_names(store), now)


def reset_current_period(store: HabitStore, habit_id: str, now: Optional[datetime] = None) -> int:
    """Drop the reports of the habit's current day or week"""
    habit = store.require_habit(habit_id)
    return store.delete_reports_since(habit.id, period_start(habit.frequency, now))


def _histories_between(store: HabitStore, start: datetime, end: datetime) -> List[HabitHistory]:
    categories = _category_names(store)
    histories = []
    for habit in store.list_habits():
        rows = store.list_reports(habit.id, since=start, until=end)
        histories.append(HabitHistory(**_history(habit, _entries(habit, rows), categories)))
    return histories


def get_habits_with_reports_for_week(store: HabitStore, day: date) -> List[HabitHistory]:
    start, end = week_bounds(day)
    return _histories_between(store, start, end)


def get_habits_with_reports_for_month(store: HabitStore, day: date) -> List[HabitHistory]:
    """Only habits that have at least one report in the month"""
    start, end = month_bounds(day)
    return [h for h in _histories_between(store, start, end) if h.reports]


def get_habits_with_last_week_reports(
    store: HabitStore,
    now: Optional[datetime] = None
) -> Tuple[List[Dict[str, str]], List[Dict[str, Any]]]:
    """Habit summaries plus a flat list of the last 7 days of reports, for coaching"""
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=7)

    habits = []
    reports = []
    for habit in store.list_habits():
        habits.append({
            "name": habit.name,
            "description": habit.description or "",
            "frequency": habit.frequency,
            "goal": habit.goal or "",
            "type": habit.type,
        })
        for entry in _entries(habit, store.list_reports(habit.id, since=since)):
            reports.append({
                "habit_name": habit.name,
                "value": entry.value.display(),
                "reported_at": entry.reported_at.isoformat(),
            })

    reports.sort(key=lambda r: r["reported_at"])
    return habits, reports


# ========== WRITES ==========

def _prepare_fields(fields: Dict[str, Any], habit_type: Optional[str]) -> Dict[str, Any]:
    prepared = {k: (v.value if isinstance(v, Enum) else v) for k, v in fields.items()}
    if habit_type == HabitType.DURATION.value and prepared.get("goal"):
        prepared["goal"] = normalize_duration_goal(prepared["goal"])
    return prepared


def create_habit(store: HabitStore, fields: Dict[str, Any]) -> str:
    habit_type = fields.get("type")
    if isinstance(habit_type, HabitType):
        habit_type = habit_type.value
    return store.create_habit(_prepare_fields(fields, habit_type))


def update_habit(store: HabitStore, habit_id: str, fields: Dict[str, Any]) -> None:
    habit = store.require_habit(habit_id)
    habit_type = fields.get("type") or habit.type
    if isinstance(habit_type, HabitType):
        habit_type = habit_type.value
    if habit_type == HabitType.DURATION.value and habit.type != habit_type and not fields.get("goal"):
        # The stored goal was written for another type; re-read it as minutes
        fields = dict(fields, goal=habit.goal)
    store.update_habit(habit_id, _prepare_fields(fields, habit_type))


def record_report(store: HabitStore, habit: Habit, raw: Any) -> Tuple[str, ReportValue]:
    """Normalize `raw` by the habit's type and append it as a report"""
    value = normalize_report_value(habit.type, raw)
    report_id = store.append_report(habit.id, dump_report_value(value))
    return report_id, value


def record_manual_report(store: HabitStore, habit: Habit, raw: Any) -> Tuple[str, ReportValue]:
    """Like record_report, but duration habits also take "1h 30m" style input"""
    if habit.type == HabitType.DURATION.value and parse_number(raw) is None and isinstance(raw, str):
        minutes = parse_duration(raw)
        if minutes is not None:
            raw = minutes
    return record_report(store, habit, raw)
