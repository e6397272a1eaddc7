"""Field descriptors, extraction policy, candidates and results."""

from jira_field_engine.models.config import (
    ExtractionMethod,
    ExtractionMode,
    ExtractionPreferences,
    FieldExtractionConfig,
    WorkItemType,
)
from jira_field_engine.models.extraction import (
    Bucket,
    CandidateSource,
    EnhancedExtractionResult,
    ExtractionCandidate,
    ExtractionSummary,
    FieldExtractionResult,
)
from jira_field_engine.models.fields import (
    ChoiceOption,
    FieldDescriptor,
    FieldOption,
    FieldType,
    PlainOption,
)

__all__ = [
    "Bucket",
    "CandidateSource",
    "ChoiceOption",
    "EnhancedExtractionResult",
    "ExtractionCandidate",
    "ExtractionMethod",
    "ExtractionMode",
    "ExtractionPreferences",
    "ExtractionSummary",
    "FieldDescriptor",
    "FieldExtractionConfig",
    "FieldExtractionResult",
    "FieldOption",
    "FieldType",
    "PlainOption",
    "WorkItemType",
]
