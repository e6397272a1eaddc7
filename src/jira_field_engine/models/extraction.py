"""Extraction candidates and the bucketed results the policy engine returns."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class CandidateSource(StrEnum):
    AI = "ai"
    PATTERN = "pattern"
    DEFAULT = "default"


class Bucket(StrEnum):
    AUTO_APPLIED = "auto-applied"
    CONFIRMATION = "confirmation"
    MANUAL = "manual"
    SKIPPED = "skipped"


class ExtractionCandidate(BaseModel):
    """One proposed value for one field. Extractors return no candidate rather
    than a zero-confidence one, so confidence is strictly positive."""

    field_id: str
    value: Any
    confidence: float = Field(gt=0.0, le=1.0)
    extraction_method: CandidateSource
    suggestion: str | None = None


class ExtractionSummary(BaseModel):
    total_fields: int = 0
    auto_applied_count: int = 0
    confirmation_count: int = 0
    manual_count: int = 0
    skipped_count: int = 0

    def is_consistent(self) -> bool:
        """Bucket counts add up to the number of processed fields."""
        return self.total_fields == (
            self.auto_applied_count
            + self.confirmation_count
            + self.manual_count
            + self.skipped_count
        )


class EnhancedExtractionResult(BaseModel):
    """Output of a config-driven extraction run. Each field id lands in exactly one bucket."""

    auto_applied: dict[str, Any] = Field(default_factory=dict)
    requires_confirmation: dict[str, ExtractionCandidate] = Field(default_factory=dict)
    manual_fields: list[str] = Field(default_factory=list)
    skipped_fields: list[str] = Field(default_factory=list)
    extraction_summary: ExtractionSummary = Field(default_factory=ExtractionSummary)

    def bucket_of(self, field_id: str) -> Bucket | None:
        if field_id in self.auto_applied:
            return Bucket.AUTO_APPLIED
        if field_id in self.requires_confirmation:
            return Bucket.CONFIRMATION
        if field_id in self.manual_fields:
            return Bucket.MANUAL
        if field_id in self.skipped_fields:
            return Bucket.SKIPPED
        return None

    def add_auto_applied(self, field_id: str, value: Any) -> None:
        self.auto_applied[field_id] = value
        self.extraction_summary.auto_applied_count += 1

    def add_confirmation(self, candidate: ExtractionCandidate) -> None:
        self.requires_confirmation[candidate.field_id] = candidate
        self.extraction_summary.confirmation_count += 1

    def add_manual(self, field_id: str) -> None:
        self.manual_fields.append(field_id)
        self.extraction_summary.manual_count += 1

    def add_skipped(self, field_id: str) -> None:
        self.skipped_fields.append(field_id)
        self.extraction_summary.skipped_count += 1


class FieldExtractionResult(BaseModel):
    """Output of the legacy whole-batch extraction path."""

    extracted_fields: list[ExtractionCandidate] = Field(default_factory=list)
    missing_fields: list[str] = Field(default_factory=list)
    suggestions: dict[str, list[str]] = Field(default_factory=dict)
