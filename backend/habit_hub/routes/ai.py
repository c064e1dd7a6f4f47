from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional
from habit_hub.core.deps import get_habit_coach, get_habit_store, get_intent_resolver
from habit_hub.services import habit_service
from habit_hub.services.habit_agent import HabitAgent, IntentResolver
from habit_hub.services.habit_feedback import HabitCoach, HabitFeedback, TimeOfDay
from habit_hub.services.habit_periods import local_timezone
from habit_hub.services.habit_store import HabitStore
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


class AgentRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=2000)


class AgentResponse(BaseModel):
    success: bool = True
    message: str
    action: Optional[str] = None
    data: Dict[str, Any] = {}


class FeedbackRequest(BaseModel):
    time_of_day: TimeOfDay


class FeedbackResponse(BaseModel):
    success: bool = True
    feedback: str


class HabitFeedbackRequest(BaseModel):
    user_preferences: Optional[str] = None


@router.post("/agent", response_model=AgentResponse)
async def invoke_habit_agent(
    request: AgentRequest,
    store: HabitStore = Depends(get_habit_store),
    resolver: IntentResolver = Depends(get_intent_resolver)
):
    """Create, update or log a habit from a natural-language instruction"""
    agent = HabitAgent(store, resolver)
    today = datetime.now(local_timezone()).date()
    result = await agent.dispatch(request.query, current_date=today)
    return AgentResponse(message=result.message, action=result.action, data=result.data)


@router.post("/feedback", response_model=FeedbackResponse)
async def weekly_feedback(
    request: FeedbackRequest,
    store: HabitStore = Depends(get_habit_store),
    coach: HabitCoach = Depends(get_habit_coach)
):
    """Coaching feedback on the last 7 days of reports"""
    habits, reports = habit_service.get_habits_with_last_week_reports(store)
    today = datetime.now(local_timezone()).date()
    feedback = await coach.weekly_feedback(habits, reports, today, request.time_of_day)
    return FeedbackResponse(feedback=feedback)


@router.post("/habits/{habit_id}/feedback", response_model=HabitFeedback)
async def habit_feedback(
    habit_id: str,
    request: HabitFeedbackRequest,
    store: HabitStore = Depends(get_habit_store),
    coach: HabitCoach = Depends(get_habit_coach)
):
    """Feedback and a reminder decision for one habit"""
    view = habit_service.get_habit_with_progress(store, habit_id)
    last_report = store.last_report_at(habit_id)
    return await coach.habit_feedback(
        view,
        last_completion_date=last_report.astimezone(local_timezone()).date().isoformat() if last_report else None,
        user_preferences=request.user_preferences
    )
