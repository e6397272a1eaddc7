"""Exceptions raised across component boundaries."""

from __future__ import annotations


class FieldEngineError(Exception):
    """Base class for engine errors."""


class AIProviderError(FieldEngineError):
    """The AI provider could not be reached, rejected the request, timed out,
    or returned nothing. AI extraction is unusable for the whole batch."""


class MetadataUnavailable(FieldEngineError):
    """The target system did not return field metadata (transport or non-2xx)."""
