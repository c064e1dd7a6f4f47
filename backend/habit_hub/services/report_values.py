"""
Typed report payloads, one variant per habit type.

A report's meaning depends on its habit's type, so the stored JSON always
carries a `kind` discriminator next to the value.
"""

import math
from typing import Annotated, Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter, ValidationError
import logging

from habit_hub.services.habit_types import HabitType, SUMMED_TYPES

logger = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return str(value)


class _NumericValue(BaseModel):
    # A str payload is an unparseable raw input kept for manual correction
    value: Union[float, str]

    @property
    def magnitude(self) -> float:
        if isinstance(self.value, float):
            return self.value
        return 0.0

    def display(self) -> str:
        if isinstance(self.value, float):
            return _format_number(self.value)
        return self.value


class NumberValue(_NumericValue):
    kind: Literal["number"] = "number"


class DurationValue(_NumericValue):
    """Minutes"""
    kind: Literal["duration"] = "duration"


class BooleanValue(BaseModel):
    kind: Literal["boolean"] = "boolean"
    value: Literal[True] = True

    @property
    def magnitude(self) -> float:
        return 0.0

    def display(self) -> str:
        return "true"


class _LabelValue(BaseModel):
    value: str

    @property
    def magnitude(self) -> float:
        return 0.0

    def display(self) -> str:
        return self.value


class TimeValue(_LabelValue):
    """Time of day, usually HH:MM"""
    kind: Literal["time"] = "time"


class OptionValue(_LabelValue):
    kind: Literal["options"] = "options"


ReportValue = Annotated[
    Union[NumberValue, DurationValue, BooleanValue, TimeValue, OptionValue],
    Field(discriminator="kind"),
]

_report_value_adapter = TypeAdapter(ReportValue)


def parse_number(raw: Any) -> Optional[float]:
    """Finite float from a number or numeric string, else None"""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def normalize_report_value(habit_type: Union[str, HabitType], raw: Any) -> ReportValue:
    """
    Build the typed value for a report on a habit of `habit_type`.

    number/duration -> float, or the original string unchanged when it is not numeric
    boolean         -> always true; a report means the habit was done
    time/options    -> the string as given
    """
    habit_type = HabitType(habit_type)

    if habit_type in SUMMED_TYPES:
        number = parse_number(raw)
        value: Union[float, str] = number if number is not None else ("" if raw is None else str(raw))
        if number is None:
            logger.warning(f"Non-numeric value {raw!r} kept as-is for {habit_type.value} report")
        if habit_type == HabitType.DURATION:
            return DurationValue(value=value)
        return NumberValue(value=value)

    if habit_type == HabitType.BOOLEAN:
        return BooleanValue()

    text = "" if raw is None else str(raw)
    if habit_type == HabitType.TIME:
        return TimeValue(value=text)
    return OptionValue(value=text)


def load_report_value(habit_type: Union[str, HabitType], payload: Any) -> ReportValue:
    """Rebuild a typed value from stored JSON; untyped legacy payloads are normalized"""
    if isinstance(payload, dict) and "kind" in payload:
        try:
            return _report_value_adapter.validate_python(payload)
        except ValidationError as e:
            logger.warning(f"Stored report payload failed validation: {e}")
            payload = payload.get("value")
    return normalize_report_value(habit_type, payload)


def dump_report_value(value: ReportValue) -> Dict[str, Any]:
    return value.model_dump()
