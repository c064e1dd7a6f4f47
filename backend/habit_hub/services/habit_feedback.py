"""
Habit Coach - encouraging feedback generated from recent habit activity
"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional
import json
import logging

from pydantic import BaseModel, ValidationError

from habit_hub.core.llm import LLMClient, LLMError, llm_client

logger = logging.getLogger(__name__)

TimeOfDay = Literal["morning", "noon", "evening"]

WELCOME_MESSAGE = (
    "Welcome! To get started on your journey, create your first habit "
    "on the 'Manage Habits' page."
)


class WeeklyFeedback(BaseModel):
    feedback: str


class HabitFeedback(BaseModel):
    feedback: str
    should_remind: bool


WEEKLY_PROMPT = """You are a friendly and insightful habit coach. Give the user personalized, encouraging and actionable feedback based on their habit progress over the last 7 days.

Current Context:
- Today's Date: {current_date}
- Time of Day: {time_of_day}

User's Habits:
{habits}

User's Reports (Last 7 Days):
{reports}

Start with a brief, friendly greeting for the time of day, then give 2-4 bullet points, each starting with '-':
- One insightful observation per bullet; look for patterns.
- Congratulate consistency and encourage them to keep the momentum.
- If they are behind on a weekly goal, point it out gently and suggest a plan.
- If they haven't reported anything for a while, give a gentle nudge.
- Be positive and supportive, never judgmental.

Respond with only a JSON object: {{"feedback": string}}"""


HABIT_PROMPT = """You are a helpful assistant that gives personalized feedback and reminders to help users stick to their habits.

Habit Name: {name}
Description: {description}
Frequency: {frequency}
Type: {type}
Goal: {goal}
Completed this period: {completed}
Progress: {status}
Last Completion Date: {last_completion}
User Preferences: {preferences}

- If the habit is already completed, congratulate the user.
- If it is not completed and it is a daily habit, you may remind them.
- Tailor the message to the user's preferences.

Respond with only a JSON object: {{"feedback": string, "should_remind": boolean}}"""


def _habit_lines(habits: List[Dict[str, Any]]) -> str:
    lines = []
    for h in habits:
        lines.append(f'- Habit: "{h["name"]}" ({h["frequency"]})')
        lines.append(f'  - Goal: {h.get("goal") or "Not set"}')
        lines.append(f'  - Type: {h["type"]}')
    return "\n".join(lines)


def _report_lines(reports: List[Dict[str, Any]]) -> str:
    if not reports:
        return "The user has not reported any progress in the last 7 days."
    return "\n".join(
        f'- On {r["reported_at"]}, for "{r["habit_name"]}", they reported: {r["value"]}'
        for r in reports
    )


class HabitCoach:
    """Generates coaching feedback with the hosted model"""

    def __init__(self, client: Optional[LLMClient] = None):
        self.client = client or llm_client

    async def weekly_feedback(
        self,
        habits: List[Dict[str, Any]],
        reports: List[Dict[str, Any]],
        current_date: date,
        time_of_day: TimeOfDay
    ) -> str:
        """Bulleted feedback on the last week; a fixed welcome when there are no habits"""
        if not habits:
            return WELCOME_MESSAGE

        prompt = WEEKLY_PROMPT.format(
            current_date=current_date.isoformat(),
            time_of_day=time_of_day,
            habits=_habit_lines(habits),
            reports=_report_lines(reports),
        )
        parsed = await self.client.complete_json([{"role": "user", "content": prompt}])
        try:
            return WeeklyFeedback.model_validate(parsed).feedback
        except ValidationError as e:
            logger.error(f"Weekly feedback did not match schema: {e}")
            raise LLMError("Weekly feedback did not match schema") from e

    async def habit_feedback(
        self,
        habit: Any,
        last_completion_date: Optional[str] = None,
        user_preferences: Optional[str] = None
    ) -> HabitFeedback:
        """Feedback and a remind/don't-remind decision for one habit view"""
        prompt = HABIT_PROMPT.format(
            name=habit.name,
            description=habit.description or "None",
            frequency=habit.frequency,
            type=getattr(habit.type, "value", habit.type),
            goal=habit.goal or "Not set",
            completed=json.dumps(bool(habit.completed)),
            status=habit.status_text or "No progress yet",
            last_completion=last_completion_date or "Never",
            preferences=user_preferences or "None",
        )
        parsed = await self.client.complete_json([{"role": "user", "content": prompt}])
        try:
            return HabitFeedback.model_validate(parsed)
        except ValidationError as e:
            logger.error(f"Habit feedback did not match schema: {e}")
            raise LLMError("Habit feedback did not match schema") from e
