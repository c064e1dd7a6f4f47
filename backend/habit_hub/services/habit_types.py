from enum import Enum


class HabitType(str, Enum):
    DURATION = "duration"
    TIME = "time"
    BOOLEAN = "boolean"
    NUMBER = "number"
    OPTIONS = "options"


class HabitFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


# Summed habits aggregate report magnitudes; boolean, time and options count reports
SUMMED_TYPES = {HabitType.NUMBER, HabitType.DURATION}
