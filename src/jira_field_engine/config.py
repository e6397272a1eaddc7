"""Engine settings via pydantic-settings.

Values come from ``FIELD_ENGINE_*`` environment variables or a ``.env`` file.
Nothing here is read at import time; construct ``EngineSettings()`` where it
is needed and pass it down.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """AI provider and logging configuration."""

    model_config = SettingsConfigDict(env_prefix="FIELD_ENGINE_", env_file=".env", extra="ignore")

    anthropic_api_key: str = Field(default="", description="Anthropic API key for direct calls")
    ai_model: str = Field(default="claude-sonnet-4-20250514", description="Model used for extraction")
    ai_max_tokens: int = Field(default=1000, description="Max tokens for extraction responses")
    ai_temperature: float = Field(default=0.1, description="Sampling temperature for extraction")
    ai_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for one AI call")

    proxy_url: str = Field(default="", description="AI proxy endpoint, e.g. /api/openai-proxy")
    proxy_api_key: str = Field(default="", description="API key forwarded through the proxy")

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {sorted(valid)}"
            raise ValueError(msg)
        return upper

    @property
    def ai_configured(self) -> bool:
        return bool(self.anthropic_api_key or self.proxy_url)
