from pydantic_settings import BaseSettings
from typing import List, Any
from pydantic import field_validator
import json


class Settings(BaseSettings):
    # Branding
    app_name: str = "Habit Hub"

    # LLM Configuration (any OpenAI-compatible chat completions endpoint)
    openai_base_url: str = "http://localhost:11434/v1"
    openai_model: str = "gpt-oss:20b"
    openai_api_key: str = "dummy"
    llm_timeout_s: float = 60.0
    llm_temperature: float = 0.2

    # Database
    database_url: str = "sqlite:///./habit_hub.db"

    # Single logical tenant used when a request carries no X-User-Id header
    default_user_id: str = "test-user"

    # Period windows (daily/weekly) are computed in this timezone
    timezone: str = "America/New_York"

    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:9002"]

    class Config:
        env_file = ".env"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v: Any) -> Any:
        """Allow CORS_ORIGINS to be provided as JSON array or comma-separated string."""
        if isinstance(v, str):
            sv = v.strip()
            if not sv:
                return []
            if sv.startswith("["):
                try:
                    parsed = json.loads(sv)
                except json.JSONDecodeError:
                    parsed = None
                if isinstance(parsed, list):
                    return parsed
            # Fallback: comma-separated
            return [s.strip() for s in sv.split(",") if s.strip()]
        return v


settings = Settings()
