"""AI extractor: asks a language model for field values and parses its JSON.

The model sees every requested field (id, name, type, required flag and up to
ten sample allowed values) plus the description, and must answer with
``{"extractions": [{"fieldId", "value", "confidence"}]}``.

A response that is not usable JSON is treated as "no extractions" so callers
fall back to patterns. A provider that fails outright (transport, auth,
timeout, empty body) raises AIProviderError: that means AI is unusable for the
whole batch and the caller has to decide what to do.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Protocol

from pydantic import ValidationError

from jira_field_engine.errors import AIProviderError
from jira_field_engine.models.extraction import CandidateSource, ExtractionCandidate
from jira_field_engine.models.fields import FieldDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
MAX_SAMPLE_VALUES = 10
MIN_ACCEPTED_CONFIDENCE = 0.5

_EXTRACTION_PROMPT = """Extract field values from the following description for Jira issue creation.

Description:
{description}

Fields to extract:
{fields}

Instructions:
1. Extract values that match the field types and requirements
2. For select fields, only use values from allowedValues if provided
3. For date fields, use ISO format (YYYY-MM-DD)
4. For number fields, extract numeric values only
5. Return null if no suitable value can be extracted
6. Be conservative - only extract values you're confident about

Return a JSON object with this structure:
{{
  "extractions": [
    {{
      "fieldId": "field_id",
      "value": "extracted_value",
      "confidence": 0.8
    }}
  ]
}}"""


class AIProvider(Protocol):
    """Sends one prompt, returns the raw text answer. May raise on failure."""

    async def complete(self, prompt: str) -> str: ...


class AIExtractor:
    """Builds the extraction prompt and turns the model's answer into candidates."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    def build_prompt(self, description: str, fields: list[FieldDescriptor]) -> str:
        fields_info = [
            {
                "id": field.id,
                "name": field.name,
                "type": field.type.value,
                "required": field.required,
                "allowedValues": field.option_labels()[:MAX_SAMPLE_VALUES] or None,
            }
            for field in fields
        ]
        return _EXTRACTION_PROMPT.format(
            description=description,
            fields=json.dumps(fields_info, indent=2),
        )

    async def extract(
        self,
        description: str,
        fields: list[FieldDescriptor],
        provider: AIProvider,
    ) -> list[ExtractionCandidate]:
        """Ask the provider for values of ``fields``.

        Raises AIProviderError if the provider call fails, times out or
        returns an empty body.
        """
        prompt = self.build_prompt(description, fields)
        try:
            response = await asyncio.wait_for(provider.complete(prompt), timeout=self._timeout)
        except AIProviderError:
            raise
        except TimeoutError as exc:
            raise AIProviderError(f"AI provider timed out after {self._timeout:g}s") from exc
        except Exception as exc:
            raise AIProviderError(f"AI provider call failed: {exc}") from exc

        if not response or not response.strip():
            raise AIProviderError("Empty response from AI provider")

        candidates = self.parse_response(response, fields)
        logger.info(
            "AI extracted %d of %d fields with confidence > %.1f",
            len(candidates),
            len(fields),
            MIN_ACCEPTED_CONFIDENCE,
        )
        return candidates

    def parse_response(
        self, response: str, fields: list[FieldDescriptor]
    ) -> list[ExtractionCandidate]:
        """Parse the model answer. Never raises; unusable answers yield []."""
        try:
            result = self._extract_json(response)
        except ValueError:
            logger.warning("AI response is not valid JSON: %s", response[:200])
            return []

        extractions = result.get("extractions") if isinstance(result, dict) else None
        if not isinstance(extractions, list):
            logger.warning("AI response has no extractions array: %s", response[:200])
            return []

        requested = {field.id for field in fields}
        candidates: list[ExtractionCandidate] = []
        for entry in extractions:
            candidate = self._to_candidate(entry, requested)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def _to_candidate(self, entry: Any, requested: set[str]) -> ExtractionCandidate | None:
        if not isinstance(entry, dict):
            return None
        field_id = entry.get("fieldId")
        value = entry.get("value")
        confidence = entry.get("confidence")
        if not field_id or value is None:
            return None
        if isinstance(confidence, bool) or not isinstance(confidence, int | float):
            return None
        if confidence <= MIN_ACCEPTED_CONFIDENCE:
            return None
        if field_id not in requested:
            logger.debug("Ignoring AI extraction for unrequested field %s", field_id)
            return None
        try:
            return ExtractionCandidate(
                field_id=str(field_id),
                value=value,
                confidence=min(float(confidence), 1.0),
                extraction_method=CandidateSource.AI,
            )
        except ValidationError as exc:
            logger.debug("Discarding malformed AI extraction for %s: %s", field_id, exc)
            return None

    def _extract_json(self, text: str) -> Any:
        """Extract JSON from the model answer, handling code fences."""
        match = re.search(r"```(?:json)?\s*\n(.*?)\n```", text, re.DOTALL)
        if match:
            return json.loads(match.group(1))
        return json.loads(text)
