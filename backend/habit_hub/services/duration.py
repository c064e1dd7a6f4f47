"""
Duration and goal string parsing.

Durations are normalized to whole minutes. Accepted inputs look like
"1h 30m", "1h30m", "30m 1h", "2h", "90m", "30 minutes" or a bare "90".
"""

import re
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)

_HOURS_RE = re.compile(r"(?<![\d.])(-?\d+)\s*h", re.IGNORECASE)
_MINUTES_RE = re.compile(r"(?<![\d.])(-?\d+)\s*m", re.IGNORECASE)
_LETTERS_RE = re.compile(r"[A-Za-z]")
_FIRST_INT_RE = re.compile(r"\d+")
_LEADING_INT_RE = re.compile(r"^\d+\s*")


def parse_duration(text: Optional[str]) -> Optional[int]:
    """
    Parse a duration string into total minutes.

    Returns None for empty input, for text with letters that matches neither
    an hours nor a minutes component, and for negative totals.
    """
    if text is None:
        return None
    text = str(text).strip()
    if not text:
        return None

    hours = _HOURS_RE.search(text)
    minutes = _MINUTES_RE.search(text)

    if hours or minutes:
        total = 0
        if hours:
            total += int(hours.group(1)) * 60
        if minutes:
            total += int(minutes.group(1))
    elif _LETTERS_RE.search(text):
        return None
    else:
        # No units at all: the whole string is a count of minutes
        try:
            total = int(text)
        except ValueError:
            return None

    if total < 0:
        return None
    return total


def format_duration(minutes: Union[int, float]) -> str:
    """Render minutes as "{h}h {m}m", omitting zero parts; zero renders as "0m"."""
    total = int(round(minutes))
    if total < 0:
        raise ValueError(f"Cannot format a negative duration: {minutes}")
    if total == 0:
        return "0m"

    hours, mins = divmod(total, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if mins:
        parts.append(f"{mins}m")
    return " ".join(parts)


def extract_goal_number(goal: Optional[str]) -> Optional[int]:
    """First integer found in a goal string ("8 glasses" -> 8), if any."""
    if not goal:
        return None
    match = _FIRST_INT_RE.search(goal)
    return int(match.group(0)) if match else None


def goal_unit(goal: Optional[str]) -> str:
    """Goal text that follows a leading number ("8 glasses" -> "glasses")."""
    if not goal:
        return ""
    return _LEADING_INT_RE.sub("", goal).strip()


def normalize_duration_goal(goal: Optional[str]) -> str:
    """Store duration goals as a minutes string when they parse ("1h 30m" -> "90")."""
    if not goal:
        return goal or ""
    minutes = parse_duration(goal)
    if minutes is None:
        logger.debug(f"Duration goal left as written: {goal!r}")
        return goal
    return str(minutes)
