import httpx
import json
import logging
from typing import Dict, List, Any, Optional
from habit_hub.core.config import settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The hosted model could not be reached or returned something unusable"""


class LLMClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url or settings.openai_base_url
        self.model = model or settings.openai_model
        self.headers = {"Authorization": f"Bearer {api_key or settings.openai_api_key}"}
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=timeout or settings.llm_timeout_s,
            transport=transport
        )

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        tools: Optional[List[Dict]] = None,
        tool_choice: str = "auto",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Send chat completion request to OpenAI-compatible endpoint"""

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": settings.llm_temperature if temperature is None else temperature,
        }

        if max_tokens:
            payload["max_tokens"] = max_tokens

        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = tool_choice

        if response_format:
            payload["response_format"] = response_format

        try:
            logger.info(f"Sending chat request to {self.base_url}")
            response = await self.client.post("/chat/completions", json=payload)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as e:
            logger.error(f"HTTP error in chat completion: {e}")
            raise LLMError(f"Chat completion failed: {e}") from e
        except ValueError as e:
            logger.error(f"Chat completion returned invalid JSON: {e}")
            raise LLMError("Chat completion returned invalid JSON") from e

        logger.info("Chat completion successful")
        return result

    @staticmethod
    def first_message(result: Dict[str, Any]) -> Dict[str, Any]:
        """The assistant message of the first choice"""
        try:
            message = result["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Malformed chat completion response: {e}") from e
        if not isinstance(message, dict):
            raise LLMError("Malformed chat completion response: message is not an object")
        return message

    async def complete_json(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Chat completion whose content is a JSON object"""
        result = await self.chat_completion(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"}
        )
        content = self.first_message(result).get("content") or ""

        # Strip markdown JSON block if present
        if "```" in content:
            content = content.split("```json")[-1] if "```json" in content else content.split("```")[1]
            content = content.split("```")[0]

        try:
            parsed = json.loads(content.strip())
        except json.JSONDecodeError as e:
            logger.error(f"Model returned non-JSON content: {content[:200]!r}")
            raise LLMError("Model returned non-JSON content") from e
        if not isinstance(parsed, dict):
            raise LLMError("Model returned JSON that is not an object")
        return parsed

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()


# Global LLM client instance
llm_client = LLMClient()
