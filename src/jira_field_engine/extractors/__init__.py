"""Extractors: turn description text into field value candidates."""

from jira_field_engine.extractors.ai import AIExtractor, AIProvider
from jira_field_engine.extractors.pattern import PatternExtractor, PatternRule
from jira_field_engine.extractors.providers import (
    AnthropicProvider,
    ProxyProvider,
    provider_from_settings,
)

__all__ = [
    "AIExtractor",
    "AIProvider",
    "AnthropicProvider",
    "PatternExtractor",
    "PatternRule",
    "ProxyProvider",
    "provider_from_settings",
]
