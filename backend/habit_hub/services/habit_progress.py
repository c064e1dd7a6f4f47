"""
Habit Progress Service - Progress calculation for all habit types

Progress is the period-scoped reduction of a habit's reports. It is always
recomputed from the reports in the current window and never stored.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Union
import logging

from habit_hub.services.duration import extract_goal_number, format_duration, goal_unit
from habit_hub.services.habit_types import HabitType, SUMMED_TYPES
from habit_hub.services.report_values import ReportValue

logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class ReportEntry:
    id: str
    value: ReportValue
    reported_at: datetime


@dataclass(frozen=True)
class ProgressAggregate:
    progress: Number
    last_reported_value: Optional[str]


@dataclass(frozen=True)
class HabitProgress:
    progress: Number
    target: int
    completed: bool
    last_reported_value: Optional[str]


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class HabitProgressCalculator:
    """Calculates progress and completion status for all habit types"""

    @staticmethod
    def aggregate(habit_type: str, reports: Sequence[ReportEntry]) -> ProgressAggregate:
        """
        Reduce in-period reports to a single progress value.

        number/duration sum the reported magnitudes (non-numeric values count
        as 0); boolean/time/options count one unit per report.
        """
        habit_type_enum = HabitType(habit_type)
        ordered = sorted(reports, key=lambda r: r.reported_at)

        if habit_type_enum in SUMMED_TYPES:
            progress: Number = sum((r.value.magnitude for r in ordered), 0.0)
        else:
            progress = len(ordered)

        last_reported_value = ordered[-1].value.display() if ordered else None
        return ProgressAggregate(progress=progress, last_reported_value=last_reported_value)

    @staticmethod
    def goal_target(habit_type: str, goal: Optional[str]) -> int:
        """Numeric target: 1 for check-in style habits, else the first integer in the goal (default 1)"""
        habit_type_enum = HabitType(habit_type)
        if habit_type_enum not in SUMMED_TYPES:
            return 1
        target = extract_goal_number(goal)
        return target if target is not None else 1

    @staticmethod
    def is_completed(progress: Number, target: Number) -> bool:
        return progress >= target

    @staticmethod
    def evaluate(habit_type: str, goal: Optional[str], reports: Sequence[ReportEntry]) -> HabitProgress:
        """Pure function of (type, goal, in-period reports) -> progress and completion"""
        aggregate = HabitProgressCalculator.aggregate(habit_type, reports)
        target = HabitProgressCalculator.goal_target(habit_type, goal)
        return HabitProgress(
            progress=aggregate.progress,
            target=target,
            completed=HabitProgressCalculator.is_completed(aggregate.progress, target),
            last_reported_value=aggregate.last_reported_value,
        )

    @staticmethod
    def progress_percentage(habit_type: str, goal: Optional[str], progress: Number) -> float:
        """Progress towards the goal as 0-100, capped at 100"""
        habit_type_enum = HabitType(habit_type)
        if habit_type_enum not in SUMMED_TYPES:
            return float(min(100, progress * 100))

        if not goal:
            # No goal: any progress is full progress
            return 100.0 if progress > 0 else 0.0

        target = extract_goal_number(goal)
        if target is None:
            target = 1
        if target <= 0:
            return 0.0
        return float(min(100, progress / target * 100))

    @staticmethod
    def status_text(
        habit_type: str,
        goal: Optional[str],
        progress: Number,
        completed: bool,
        last_reported_value: Optional[str]
    ) -> str:
        """Generate a human-readable progress summary"""
        habit_type_enum = HabitType(habit_type)

        if habit_type_enum == HabitType.TIME:
            if last_reported_value:
                return f"Reported at {last_reported_value}" + (f" (Goal: {goal})" if goal else "")
            return f"Goal: {goal}" if goal else "Log a time"

        if habit_type_enum == HabitType.OPTIONS:
            if last_reported_value:
                return f"Last choice: {last_reported_value}"
            return f"Goal: {goal}" if goal else "Make a choice"

        if habit_type_enum == HabitType.BOOLEAN:
            if completed:
                return "Completed" + (f": {goal}" if goal else "")
            return f"Goal: {goal}" if goal else "Mark as done"

        if habit_type_enum == HabitType.NUMBER:
            if not goal:
                return f"Progress: {_format_number(progress)}"
            target = extract_goal_number(goal) or 0
            return f"Progress: {_format_number(progress)} / {target} {goal_unit(goal)}".rstrip()

        # Duration goals are stored as minutes
        if not goal:
            return f"Progress: {format_duration(max(progress, 0))}"
        target = extract_goal_number(goal) or 0
        return f"Progress: {format_duration(max(progress, 0))} / {format_duration(target)}"


def dashboard_summary(habit_views: Sequence[Any]) -> Dict[str, int]:
    """Completed/total counts and the rounded completion rate for a dashboard"""
    total = len(habit_views)
    completed = sum(1 for h in habit_views if h.completed)
    return {
        "completed_count": completed,
        "total_count": total,
        "completion_rate": int(completed * 100 / total + 0.5) if total else 0,
    }
