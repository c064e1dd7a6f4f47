from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session
from habit_hub.core.config import settings
from habit_hub.db.session import get_db
from habit_hub.services.habit_agent import IntentResolver, LLMIntentResolver
from habit_hub.services.habit_feedback import HabitCoach
from habit_hub.services.habit_store import HabitStore


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """User whose data path the request works on; sign-in happens upstream"""
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return settings.default_user_id


async def get_habit_store(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> HabitStore:
    return HabitStore(db, user_id)


def get_intent_resolver() -> IntentResolver:
    return LLMIntentResolver()


def get_habit_coach() -> HabitCoach:
    return HabitCoach()
