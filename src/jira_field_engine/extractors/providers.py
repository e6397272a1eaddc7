"""AI provider handles: direct Anthropic calls, or an HTTP proxy endpoint.

Both satisfy ``AIProvider``: one prompt in, raw text out, AIProviderError on
any transport or API failure.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from anthropic import APIError, AsyncAnthropic

from jira_field_engine.config import EngineSettings
from jira_field_engine.errors import AIProviderError
from jira_field_engine.extractors.ai import AIProvider

logger = logging.getLogger(__name__)


class AnthropicProvider:
    """Calls Claude through the Anthropic SDK."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 1000,
        temperature: float = 0.1,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client: AsyncAnthropic | None = None

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            kwargs: dict[str, str] = {}
            if self._api_key:
                kwargs["api_key"] = self._api_key
            self._client = AsyncAnthropic(**kwargs)
        return self._client

    async def complete(self, prompt: str) -> str:
        client = self._get_client()
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIError as exc:
            raise AIProviderError(f"Anthropic API error: {exc}") from exc

        parts = [block.text for block in response.content if getattr(block, "type", "") == "text"]
        return "".join(parts)


class ProxyProvider:
    """Posts the prompt to a proxy endpoint that fronts some AI provider.

    The proxy takes ``{prompt, apiKey, maxTokens, temperature}`` and answers
    with ``{"content": ...}`` or ``{"response": ...}``.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        *,
        max_tokens: int = 1000,
        temperature: float = 0.1,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._client = client

    async def complete(self, prompt: str) -> str:
        body = {
            "prompt": prompt,
            "apiKey": self._api_key,
            "maxTokens": self._max_tokens,
            "temperature": self._temperature,
        }
        try:
            if self._client is not None:
                resp = await self._client.post(self._endpoint, json=body)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(self._endpoint, json=body)
        except httpx.HTTPError as exc:
            raise AIProviderError(f"AI provider request failed: {exc}") from exc

        if not resp.is_success:
            raise AIProviderError(f"AI provider request failed: {_error_detail(resp)}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise AIProviderError("AI provider returned a non-JSON envelope") from exc
        if not isinstance(data, dict):
            return ""
        return str(data.get("content") or data.get("response") or "")


def _error_detail(resp: httpx.Response) -> str:
    try:
        data: Any = resp.json()
    except ValueError:
        return resp.reason_phrase or str(resp.status_code)
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return resp.reason_phrase or str(resp.status_code)


def provider_from_settings(settings: EngineSettings) -> AIProvider | None:
    """Pick a provider from settings; None when AI is not configured."""
    if settings.anthropic_api_key:
        return AnthropicProvider(
            api_key=settings.anthropic_api_key,
            model=settings.ai_model,
            max_tokens=settings.ai_max_tokens,
            temperature=settings.ai_temperature,
        )
    if settings.proxy_url:
        return ProxyProvider(
            settings.proxy_url,
            settings.proxy_api_key,
            max_tokens=settings.ai_max_tokens,
            temperature=settings.ai_temperature,
            timeout=settings.ai_timeout_seconds,
        )
    logger.info("No AI provider configured; pattern extraction only")
    return None
