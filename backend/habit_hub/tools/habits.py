"""
Habit tools - the three writes the habit agent may perform
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Literal, Optional, Type
import logging

from pydantic import BaseModel, ConfigDict, Field, field_validator

from habit_hub.services import habit_service
from habit_hub.services.duration import format_duration
from habit_hub.services.habit_store import HabitStore
from habit_hub.services.report_values import BooleanValue, DurationValue, NumberValue, OptionValue
from habit_hub.tools.base import BaseTool, ToolResult, ToolValidationError

logger = logging.getLogger(__name__)

HabitTypeName = Literal["duration", "time", "boolean", "number", "options"]
FrequencyName = Literal["daily", "weekly"]
IconName = Literal[
    "Dumbbell", "Leaf", "Carrot", "BookOpen", "GraduationCap",
    "Languages", "FolderKanban", "Target", "Clock",
]


def split_options(options: Optional[str]) -> List[str]:
    return [o.strip() for o in (options or "").split(",") if o.strip()]


@dataclass(frozen=True)
class HabitSnapshot:
    id: str
    name: str
    description: str
    type: str
    frequency: str
    goal: str
    options: Optional[str] = None


@dataclass(frozen=True)
class CategorySnapshot:
    id: str
    name: str


@dataclass
class AgentContext:
    """Read-only view of the user's habits and categories at dispatch time"""
    habits: List[HabitSnapshot] = field(default_factory=list)
    categories: List[CategorySnapshot] = field(default_factory=list)
    current_date: date = field(default_factory=date.today)

    @classmethod
    def from_store(cls, store: HabitStore, current_date: Optional[date] = None) -> "AgentContext":
        habits = [
            HabitSnapshot(
                id=h.id, name=h.name, description=h.description or "", type=h.type,
                frequency=h.frequency, goal=h.goal or "", options=h.options,
            )
            for h in store.list_habits()
        ]
        categories = [CategorySnapshot(id=c.id, name=c.name) for c in store.list_categories()]
        return cls(habits=habits, categories=categories, current_date=current_date or date.today())

    def habit(self, habit_id: str) -> Optional[HabitSnapshot]:
        return next((h for h in self.habits if h.id == habit_id), None)

    def has_category(self, category_id: str) -> bool:
        return any(c.id == category_id for c in self.categories)


class _ToolArgs(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class CreateHabitArgs(_ToolArgs):
    name: str = Field(..., min_length=1, description="The name of the habit.")
    description: str = Field(..., description="A short description of the habit.")
    type: HabitTypeName = Field(..., description="The type of value the habit tracks.")
    frequency: FrequencyName = Field(..., description="How often the habit is tracked.")
    goal: str = Field(..., min_length=1, description='The goal for the habit, e.g. "8 glasses" or "30 minutes".')
    icon: IconName = Field(..., description="An icon for the habit.")
    category_id: Optional[str] = Field(None, description="The ID of the category this habit belongs to.")
    options: Optional[str] = Field(None, description='Comma-separated options for "options" type habits.')


class UpdateHabitArgs(_ToolArgs):
    habit_id: str = Field(..., min_length=1, description="The ID of the habit to update.")
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    type: Optional[HabitTypeName] = None
    frequency: Optional[FrequencyName] = None
    goal: Optional[str] = Field(None, min_length=1)
    icon: Optional[IconName] = None
    category_id: Optional[str] = None
    options: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"habit_id"}, exclude_none=True)


class ReportProgressArgs(_ToolArgs):
    habit_id: str = Field(..., min_length=1, description="The ID of the habit to report progress for.")
    value: str = Field(
        ...,
        min_length=1,
        description=(
            'The value to report. boolean: "true". number/duration: the number only, as a string '
            '(minutes for duration). time: HH:MM. options: one of the habit\'s options.'
        ),
    )

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (int, float)):
            return str(v)
        return v


class CreateHabitTool(BaseTool):
    """Tool for creating a new habit"""

    @property
    def name(self) -> str:
        return "create_habit"

    @property
    def description(self) -> str:
        return "Create a new habit for the user."

    @property
    def args_model(self) -> Type[BaseModel]:
        return CreateHabitArgs

    @property
    def action_phrase(self) -> str:
        return "create that habit"

    def check_context(self, args: CreateHabitArgs, context: AgentContext) -> None:
        if args.category_id and not context.has_category(args.category_id):
            raise ToolValidationError("I couldn't find that category. Which existing category should the habit go in?")

    def execute(self, store: HabitStore, args: CreateHabitArgs, context: AgentContext) -> ToolResult:
        habit_id = habit_service.create_habit(store, args.model_dump(exclude_none=True))
        return ToolResult(
            success=True,
            data={"habit_id": habit_id},
            message=f'Created the new {args.frequency} habit "{args.name}" with the goal "{args.goal}".'
        )


class UpdateHabitTool(BaseTool):
    """Tool for changing fields of an existing habit"""

    @property
    def name(self) -> str:
        return "update_habit"

    @property
    def description(self) -> str:
        return "Update one or more fields of an existing habit. Only pass the fields that change."

    @property
    def args_model(self) -> Type[BaseModel]:
        return UpdateHabitArgs

    @property
    def action_phrase(self) -> str:
        return "update that habit"

    def check_context(self, args: UpdateHabitArgs, context: AgentContext) -> None:
        habit = context.habit(args.habit_id)
        if habit is None:
            raise ToolValidationError("I couldn't find that habit. Which of your habits did you mean?")
        if not args.changes():
            raise ToolValidationError(f'What would you like to change about "{habit.name}"?')
        if args.category_id and not context.has_category(args.category_id):
            raise ToolValidationError("I couldn't find that category. Which existing category did you mean?")

    def execute(self, store: HabitStore, args: UpdateHabitArgs, context: AgentContext) -> ToolResult:
        habit = context.habit(args.habit_id)
        changes = args.changes()
        habit_service.update_habit(store, args.habit_id, changes)
        return ToolResult(
            success=True,
            data={"habit_id": args.habit_id, "fields": sorted(changes)},
            message=f'Updated "{habit.name}" ({", ".join(sorted(changes))}).'
        )


class ReportProgressTool(BaseTool):
    """Tool for logging progress on a habit"""

    @property
    def name(self) -> str:
        return "report_progress"

    @property
    def description(self) -> str:
        return "Report progress for a specific habit."

    @property
    def args_model(self) -> Type[BaseModel]:
        return ReportProgressArgs

    @property
    def action_phrase(self) -> str:
        return "log that progress"

    def check_context(self, args: ReportProgressArgs, context: AgentContext) -> None:
        habit = context.habit(args.habit_id)
        if habit is None:
            raise ToolValidationError("I couldn't find that habit. Which of your habits did you mean?")
        if habit.type == "options":
            options = split_options(habit.options)
            if options and args.value.lower() not in {o.lower() for o in options}:
                raise ToolValidationError(
                    f'"{habit.name}" accepts one of: {", ".join(options)}. Which one should I log?'
                )

    def execute(self, store: HabitStore, args: ReportProgressArgs, context: AgentContext) -> ToolResult:
        habit = context.habit(args.habit_id)
        raw = args.value
        if habit.type == "options":
            # Store the option as the habit spells it
            raw = next((o for o in split_options(habit.options) if o.lower() == raw.lower()), raw)
        report_id, value = habit_service.record_report(store, habit, raw)
        return ToolResult(
            success=True,
            data={"habit_id": habit.id, "report_id": report_id, "value": value.model_dump()},
            message=_report_message(habit.name, value)
        )


def _report_message(habit_name: str, value) -> str:
    if isinstance(value, BooleanValue):
        return f'Marked "{habit_name}" as done.'
    if isinstance(value, (NumberValue, DurationValue)) and isinstance(value.value, str):
        return (
            f'Logged "{value.value}" for "{habit_name}". It isn\'t a number, '
            "so it won't count toward your goal until it's corrected."
        )
    if isinstance(value, DurationValue) and value.magnitude >= 0:
        return f'Logged {format_duration(value.magnitude)} for "{habit_name}".'
    if isinstance(value, OptionValue):
        return f'Logged "{value.value}" for "{habit_name}".'
    return f'Logged {value.display()} for "{habit_name}".'
