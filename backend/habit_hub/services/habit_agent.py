"""
Habit Agent - turns one natural-language instruction into at most one write

The hosted model only proposes an operation. Everything it returns is
treated as untrusted: the tool schema, habit and category ids, and report
values are checked here before anything touches the store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Union
import json
import logging

from pydantic import BaseModel

from habit_hub.core.llm import LLMClient, LLMError, llm_client
from habit_hub.services.habit_store import HabitStore
from habit_hub.tools.base import ToolValidationError
from habit_hub.tools.habits import AgentContext
from habit_hub.tools.registry import ToolRegistry, tool_registry

logger = logging.getLogger(__name__)


@dataclass
class OperationCall:
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ClarificationRequest:
    message: str


Intent = Union[OperationCall, ClarificationRequest]


class AgentResult(BaseModel):
    message: str
    # Name of the operation performed; None when the agent asked a question instead
    action: Optional[str] = None
    data: Dict[str, Any] = {}

    @property
    def needs_clarification(self) -> bool:
        return self.action is None


class IntentResolver(ABC):
    """Chooses an operation (or a question back to the user) for an instruction"""

    @abstractmethod
    async def resolve_intent(self, instruction: str, context: AgentContext) -> Intent:
        pass


def build_context_prompt(context: AgentContext) -> str:
    lines = ["Available Habits:"]
    if context.habits:
        for h in context.habits:
            line = f'- Name: "{h.name}", ID: {h.id}, Type: {h.type}, Frequency: {h.frequency}'
            if h.options:
                line += f", Options: [{h.options}]"
            if h.goal:
                line += f', Goal: "{h.goal}"'
            lines.append(line)
    else:
        lines.append("The user has no habits.")

    lines.append("")
    lines.append("Available Categories:")
    if context.categories:
        for c in context.categories:
            lines.append(f'- Name: "{c.name}", ID: {c.id}')
    else:
        lines.append("The user has no categories.")
    return "\n".join(lines)


SYSTEM_PROMPT = """You are the assistant of a habit tracking app. Translate the user's request into exactly ONE call to the provided tools.

- create_habit adds a new habit, update_habit changes fields of an existing habit, report_progress logs progress for an existing habit.
- Use only habit and category IDs listed in the context. If the request names a habit that is not listed, or matches several, do not call a tool: ask which habit they mean.
- If any required detail is missing or ambiguous, do not guess and do not call a tool: reply with one short clarifying question.
- If the request asks for several actions, do not call a tool: ask the user to send them one at a time.

Values for report_progress, based on the habit's type:
- boolean: "true" when the user says they did it.
- number / duration: the number only, as a string ("read 15 pages" -> "15", "meditated for 10 minutes" -> "10"). Durations are in minutes ("1 hour" -> "60"). If they confirm doing it without a number, use "1".
- time: HH:MM in 24h format ("woke up at 7am" -> "07:00").
- options: the option from the habit's list that best matches what they said.

Today's date is {current_date}.

{context}"""


class LLMIntentResolver(IntentResolver):
    """Resolves intents with one tool-calling chat completion"""

    def __init__(self, client: Optional[LLMClient] = None, registry: Optional[ToolRegistry] = None):
        self.client = client or llm_client
        self.registry = registry or tool_registry

    def build_messages(self, instruction: str, context: AgentContext) -> List[Dict[str, str]]:
        system = SYSTEM_PROMPT.format(
            current_date=context.current_date.isoformat(),
            context=build_context_prompt(context),
        )
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": instruction},
        ]

    async def resolve_intent(self, instruction: str, context: AgentContext) -> Intent:
        result = await self.client.chat_completion(
            messages=self.build_messages(instruction, context),
            tools=self.registry.get_openai_schemas(),
            tool_choice="auto",
        )
        message = self.client.first_message(result)
        tool_calls = message.get("tool_calls") or []

        if len(tool_calls) > 1:
            logger.warning(f"Model proposed {len(tool_calls)} operations for one instruction")
            return ClarificationRequest(
                "I can only do one thing at a time. Which of those should I do first?"
            )

        if tool_calls:
            function = (tool_calls[0] or {}).get("function") or {}
            name = function.get("name")
            if not name:
                raise LLMError("Tool call without a function name")
            raw_arguments = function.get("arguments") or "{}"
            if isinstance(raw_arguments, dict):
                return OperationCall(name=name, arguments=raw_arguments)
            try:
                arguments = json.loads(raw_arguments)
            except (TypeError, json.JSONDecodeError):
                logger.warning(f"Undecodable arguments for {name}: {raw_arguments!r}")
                arguments = None
            return OperationCall(name=name, arguments=arguments)

        content = (message.get("content") or "").strip()
        if not content:
            raise LLMError("Model returned neither a tool call nor a message")
        return ClarificationRequest(content)


class HabitAgent:
    """Dispatches a natural-language instruction to a single validated habit write"""

    def __init__(
        self,
        store: HabitStore,
        resolver: Optional[IntentResolver] = None,
        registry: Optional[ToolRegistry] = None
    ):
        self.store = store
        self.resolver = resolver or LLMIntentResolver()
        self.registry = registry or tool_registry

    async def dispatch(self, query: str, current_date: Optional[date] = None) -> AgentResult:
        """
        Resolve `query` against a snapshot of the user's habits and categories.

        Returns a confirmation after exactly one write, or a clarifying question
        with no write at all. LLMError propagates when the model is unusable.
        """
        context = AgentContext.from_store(self.store, current_date)
        intent = await self.resolver.resolve_intent(query, context)

        if isinstance(intent, ClarificationRequest):
            logger.info("Habit agent asked for clarification")
            return AgentResult(message=intent.message)

        tool = self.registry.get_tool(intent.name)
        if tool is None:
            logger.warning(f"Model chose unknown operation: {intent.name}")
            return AgentResult(
                message="I'm not sure what you'd like me to do. You can create a habit, change one, or log progress."
            )

        try:
            args = tool.validate(intent.arguments, context)
        except ToolValidationError as e:
            logger.warning(f"Rejected {tool.name} arguments: {e.message}")
            return AgentResult(message=e.message)

        result = tool.execute(self.store, args, context)
        logger.info(f"Habit agent performed {tool.name}")
        return AgentResult(message=result.message, action=tool.name, data=result.data or {})
