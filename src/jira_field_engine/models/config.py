"""User extraction policy: per-field configs and global preferences.

These are stored by the browser tool in camelCase JSON, so the models accept
both the stored aliases and Python field names.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExtractionMethod(StrEnum):
    AI = "ai"
    PATTERN = "pattern"
    MANUAL = "manual"


class ExtractionMode(StrEnum):
    AUTO_APPLY = "auto-apply"
    ALWAYS_CONFIRM = "always-confirm"
    MANUAL_ONLY = "manual-only"


class WorkItemType(StrEnum):
    EPIC = "epic"
    STORY = "story"
    TASK = "task"
    INITIATIVE = "initiative"
    BUG = "bug"
    ALL = "all"


class FieldExtractionConfig(BaseModel):
    """Per-field extraction policy, keyed by jira_field_id."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    jira_field_id: str
    field_id: str | None = None
    extraction_enabled: bool = True
    extraction_method: ExtractionMethod = ExtractionMethod.AI
    extraction_mode: ExtractionMode = ExtractionMode.AUTO_APPLY
    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    display_name: str | None = None
    required_for_submission: bool = False


class ExtractionPreferences(BaseModel):
    """Global fallback policy for fields without their own config."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    default_method: ExtractionMethod = ExtractionMethod.AI
    global_confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    require_confirmation_for_all: bool = False
    enable_smart_defaults: bool = True
