import asyncio
import json
from datetime import date

import httpx
import pytest

from habit_hub.core.llm import LLMClient, LLMError
from habit_hub.services import habit_service
from habit_hub.services.habit_feedback import WELCOME_MESSAGE, HabitCoach


def coach_replying(content):
    prompts = []

    def handler(request):
        body = json.loads(request.content)
        prompts.append(body["messages"][0]["content"])
        assert body["response_format"] == {"type": "json_object"}
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    client = LLMClient(base_url="http://llm.test/v1", model="m", api_key="k", transport=httpx.MockTransport(handler))
    return HabitCoach(client=client), prompts


def test_no_habits_gets_welcome_without_model_call():
    coach, prompts = coach_replying("{}")
    feedback = asyncio.run(coach.weekly_feedback([], [], date(2024, 5, 15), "morning"))
    assert feedback == WELCOME_MESSAGE
    assert prompts == []


def test_weekly_feedback_uses_reports(store, make_habit):
    habit = make_habit(name="Read", goal="20 pages")
    habit_service.record_report(store, habit, "12")
    habits, reports = habit_service.get_habits_with_last_week_reports(store)

    coach, prompts = coach_replying('```json\n{"feedback": "Good morning!\\n- Great reading streak."}\n```')
    feedback = asyncio.run(coach.weekly_feedback(habits, reports, date(2024, 5, 15), "morning"))

    assert feedback.startswith("Good morning!")
    assert '"Read" (daily)' in prompts[0]
    assert 'they reported: 12' in prompts[0]
    assert "Time of Day: morning" in prompts[0]


def test_habit_feedback(store, make_habit):
    habit = make_habit(name="Floss", type="boolean", goal="Every day")
    view = habit_service.get_habit_with_progress(store, habit.id)

    coach, prompts = coach_replying('{"feedback": "Time to floss!", "should_remind": true}')
    result = asyncio.run(coach.habit_feedback(view, None, "short messages"))

    assert result.should_remind is True
    assert result.feedback == "Time to floss!"
    assert "Completed this period: false" in prompts[0]
    assert "User Preferences: short messages" in prompts[0]
    assert "Last Completion Date: Never" in prompts[0]


def test_feedback_with_wrong_shape_is_an_error(store, make_habit):
    habit = make_habit()
    view = habit_service.get_habit_with_progress(store, habit.id)
    coach, _ = coach_replying('{"message": "hi"}')
    with pytest.raises(LLMError):
        asyncio.run(coach.habit_feedback(view))


def test_feedback_that_is_not_json_is_an_error():
    coach, _ = coach_replying("Keep it up!")
    with pytest.raises(LLMError):
        asyncio.run(coach.weekly_feedback([{"name": "x", "frequency": "daily", "type": "boolean"}], [], date.today(), "noon"))
