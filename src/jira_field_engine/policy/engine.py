"""Extraction policy engine: decides, field by field, how a value is obtained
and which bucket it lands in.

For every field that is configured, or required by Jira:

1. config disabled                         -> skipped
2. method manual or mode manual-only       -> manual
3. AI (if method is ai and a provider was given), then patterns, each gated
   by the field's confidence threshold; nothing found -> manual
4. auto-apply mode: auto-applied when confidence >= threshold, else
   confirmation; always-confirm: confirmation. ``require_confirmation_for_all``
   turns every auto-apply into a confirmation.

Required fields without a config follow the global preferences instead.
Fields are processed sequentially in the order given. A failure while
extracting one field is logged and that field goes to manual; it never
aborts the run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from jira_field_engine.errors import AIProviderError
from jira_field_engine.extractors.ai import AIExtractor, AIProvider
from jira_field_engine.extractors.pattern import PatternExtractor
from jira_field_engine.models.config import (
    ExtractionMethod,
    ExtractionMode,
    ExtractionPreferences,
    FieldExtractionConfig,
    WorkItemType,
)
from jira_field_engine.models.extraction import (
    EnhancedExtractionResult,
    ExtractionCandidate,
    FieldExtractionResult,
)
from jira_field_engine.models.fields import FieldDescriptor
from jira_field_engine.suggestions import SuggestionRanker

logger = logging.getLogger(__name__)

# Unconfigured fields are only auto-applied at or above this confidence.
DEFAULT_AUTO_APPLY_CONFIDENCE = 0.8


class ExtractionPolicyEngine:
    """Stateless orchestrator; collaborators are injected, handles passed per call."""

    def __init__(
        self,
        pattern: PatternExtractor | None = None,
        ai: AIExtractor | None = None,
        ranker: SuggestionRanker | None = None,
    ) -> None:
        self._pattern = pattern or PatternExtractor()
        self._ai = ai or AIExtractor()
        self._ranker = ranker or SuggestionRanker()

    async def run_extraction(
        self,
        text: str,
        fields: list[FieldDescriptor],
        work_item_type: WorkItemType | str,
        configs: Iterable[FieldExtractionConfig] | Mapping[str, FieldExtractionConfig],
        preferences: ExtractionPreferences | None = None,
        ai_provider: AIProvider | None = None,
    ) -> EnhancedExtractionResult:
        prefs = preferences or ExtractionPreferences()
        by_field = _index_configs(configs)
        logger.info(
            "Starting extraction for %s with %d configured fields", work_item_type, len(by_field)
        )

        result = EnhancedExtractionResult()
        seen: set[str] = set()
        for field in fields:
            config = by_field.get(field.id)
            if config is None and not field.required:
                continue
            if field.id in seen:
                logger.warning("Field %s listed twice; keeping the first classification", field.id)
                continue
            seen.add(field.id)
            result.extraction_summary.total_fields += 1

            if config is None:
                await self._classify_with_defaults(text, field, prefs, result, ai_provider)
            else:
                await self._classify_configured(text, field, config, prefs, result, ai_provider)

        summary = result.extraction_summary
        logger.info(
            "Extraction completed: %d auto-applied, %d require confirmation, %d manual, %d skipped",
            summary.auto_applied_count,
            summary.confirmation_count,
            summary.manual_count,
            summary.skipped_count,
        )
        return result

    async def _classify_configured(
        self,
        text: str,
        field: FieldDescriptor,
        config: FieldExtractionConfig,
        prefs: ExtractionPreferences,
        result: EnhancedExtractionResult,
        ai_provider: AIProvider | None,
    ) -> None:
        if not config.extraction_enabled:
            result.add_skipped(field.id)
            return

        if (
            config.extraction_method == ExtractionMethod.MANUAL
            or config.extraction_mode == ExtractionMode.MANUAL_ONLY
        ):
            result.add_manual(field.id)
            return

        candidate = await self._extract_configured(text, field, config, ai_provider)
        if candidate is None:
            result.add_manual(field.id)
        elif self.should_auto_apply(config, candidate, prefs):
            result.add_auto_applied(field.id, candidate.value)
        else:
            result.add_confirmation(self._with_hint(candidate, field, text))

    async def _classify_with_defaults(
        self,
        text: str,
        field: FieldDescriptor,
        prefs: ExtractionPreferences,
        result: EnhancedExtractionResult,
        ai_provider: AIProvider | None,
    ) -> None:
        candidate = None
        if prefs.default_method == ExtractionMethod.AI and ai_provider is not None:
            candidate = await self._try_ai(text, field, ai_provider)
        if candidate is None:
            candidate = self._try_pattern(text, field)

        if candidate is None or candidate.confidence < prefs.global_confidence_threshold:
            result.add_manual(field.id)
        elif (
            not prefs.require_confirmation_for_all
            and candidate.confidence >= DEFAULT_AUTO_APPLY_CONFIDENCE
        ):
            result.add_auto_applied(field.id, candidate.value)
        else:
            result.add_confirmation(self._with_hint(candidate, field, text))

    async def _extract_configured(
        self,
        text: str,
        field: FieldDescriptor,
        config: FieldExtractionConfig,
        ai_provider: AIProvider | None,
    ) -> ExtractionCandidate | None:
        threshold = config.confidence_threshold

        if config.extraction_method == ExtractionMethod.AI and ai_provider is not None:
            candidate = await self._try_ai(text, field, ai_provider)
            if candidate is not None and candidate.confidence >= threshold:
                return candidate

        candidate = self._try_pattern(text, field)
        if candidate is not None and candidate.confidence >= threshold:
            return candidate
        return None

    @staticmethod
    def should_auto_apply(
        config: FieldExtractionConfig,
        candidate: ExtractionCandidate,
        prefs: ExtractionPreferences,
    ) -> bool:
        if prefs.require_confirmation_for_all:
            return False
        if config.extraction_mode == ExtractionMode.AUTO_APPLY:
            return candidate.confidence >= config.confidence_threshold
        # always-confirm, and manual-only should it ever get this far
        return False

    async def _try_ai(
        self, text: str, field: FieldDescriptor, ai_provider: AIProvider
    ) -> ExtractionCandidate | None:
        try:
            candidates = await self._ai.extract(text, [field], ai_provider)
        except AIProviderError as exc:
            logger.warning("AI extraction failed for %s: %s", field.id, exc)
            return None
        return candidates[0] if candidates else None

    def _try_pattern(self, text: str, field: FieldDescriptor) -> ExtractionCandidate | None:
        try:
            return self._pattern.extract_field(text, field)
        except Exception as exc:  # a broken rule must not abort the batch
            logger.warning("Pattern extraction failed for %s: %s", field.id, exc)
            return None

    def _with_hint(
        self, candidate: ExtractionCandidate, field: FieldDescriptor, text: str
    ) -> ExtractionCandidate:
        return candidate.model_copy(update={"suggestion": self._ranker.hint(field, text)})

    async def extract_field_values(
        self,
        text: str,
        fields: list[FieldDescriptor],
        ai_provider: AIProvider | None = None,
    ) -> FieldExtractionResult:
        """Whole-batch extraction kept for older callers.

        Asks the AI for all fields at once, then runs patterns over whatever
        it did not return. No thresholds or buckets; see ``run_extraction``.
        """
        extracted: list[ExtractionCandidate] = []

        if ai_provider is not None:
            try:
                ai_candidates = await self._ai.extract(text, fields, ai_provider)
            except AIProviderError as exc:
                logger.warning("AI extraction failed, falling back to pattern matching: %s", exc)
            else:
                seen: set[str] = set()
                for candidate in ai_candidates:
                    if candidate.field_id not in seen:
                        seen.add(candidate.field_id)
                        extracted.append(candidate)
        else:
            logger.info("No AI provider configured, using pattern matching only")

        extracted_ids = {c.field_id for c in extracted}
        for field in fields:
            if field.id in extracted_ids:
                continue
            candidate = self._try_pattern(text, field)
            if candidate is not None:
                extracted.append(candidate)
                extracted_ids.add(field.id)

        suggestions = {
            field.id: self._ranker.suggest(field, text) for field in fields if field.allowed_values
        }
        missing = [field.id for field in fields if field.required and field.id not in extracted_ids]

        return FieldExtractionResult(
            extracted_fields=extracted,
            missing_fields=missing,
            suggestions=suggestions,
        )


def _index_configs(
    configs: Iterable[FieldExtractionConfig] | Mapping[str, FieldExtractionConfig],
) -> dict[str, FieldExtractionConfig]:
    values = configs.values() if isinstance(configs, Mapping) else configs
    indexed: dict[str, FieldExtractionConfig] = {}
    for config in values:
        indexed.setdefault(config.jira_field_id, config)
    return indexed
