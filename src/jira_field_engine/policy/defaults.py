"""Default and migrated per-field extraction configs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from jira_field_engine.catalog.categories import field_usage_stats
from jira_field_engine.catalog.normalizer import (
    DELIVERY_QUARTER_FIELD_ID,
    INCLUDE_ON_ROADMAP_FIELD_ID,
)
from jira_field_engine.models.config import (
    ExtractionMethod,
    ExtractionMode,
    ExtractionPreferences,
    FieldExtractionConfig,
)
from jira_field_engine.models.fields import FieldDescriptor

_LEGACY_KEYS = ("autoApply", "confirmationRequired", "auto_apply", "confirmation_required")


def default_extraction_method(field: FieldDescriptor) -> ExtractionMethod:
    """Patterns for fields the heuristics handle well, AI for everything else."""
    name = field.name.lower()
    if (
        "priority" in name
        or "quarter" in name
        or field.id in (DELIVERY_QUARTER_FIELD_ID, INCLUDE_ON_ROADMAP_FIELD_ID)
    ):
        return ExtractionMethod.PATTERN
    return ExtractionMethod.AI


def default_extraction_mode(field: FieldDescriptor) -> ExtractionMode:
    return ExtractionMode.AUTO_APPLY if field.required else ExtractionMode.ALWAYS_CONFIRM


def default_config_for(
    field: FieldDescriptor, preferences: ExtractionPreferences | None = None
) -> FieldExtractionConfig:
    prefs = preferences or ExtractionPreferences()
    method = default_extraction_method(field) if prefs.enable_smart_defaults else prefs.default_method
    return FieldExtractionConfig(
        jira_field_id=field.id,
        field_id=field.id,
        extraction_enabled=True,
        extraction_method=method,
        extraction_mode=default_extraction_mode(field),
        confidence_threshold=prefs.global_confidence_threshold,
        display_name=field.name,
    )


def config_for_discovered(field: FieldDescriptor) -> FieldExtractionConfig:
    """Config for a field the user just picked from the discovery view."""
    stats = field_usage_stats(field)
    mode = (
        ExtractionMode.AUTO_APPLY
        if stats.is_popular and stats.usage_percentage > 80
        else ExtractionMode.ALWAYS_CONFIRM
    )
    return FieldExtractionConfig(
        jira_field_id=field.id,
        field_id=field.id,
        extraction_method=default_extraction_method(field),
        extraction_mode=mode,
        confidence_threshold=0.8 if stats.is_popular else 0.7,
        display_name=field.name,
    )


def migrate_legacy_config(raw: Mapping[str, Any]) -> FieldExtractionConfig:
    """Load a stored config, translating the old autoApply/confirmationRequired
    booleans into an extraction mode."""
    data = dict(raw)
    auto_apply = data.get("autoApply", data.get("auto_apply"))
    confirmation_required = data.get("confirmationRequired", data.get("confirmation_required"))
    for key in _LEGACY_KEYS:
        data.pop(key, None)

    if auto_apply is not None and confirmation_required is not None:
        method = data.get("extractionMethod", data.get("extraction_method"))
        if method == ExtractionMethod.MANUAL:
            mode = ExtractionMode.MANUAL_ONLY
        elif confirmation_required:
            mode = ExtractionMode.ALWAYS_CONFIRM
        elif auto_apply:
            mode = ExtractionMode.AUTO_APPLY
        else:
            mode = ExtractionMode.ALWAYS_CONFIRM
        data.pop("extraction_mode", None)
        data["extractionMode"] = mode
    elif not (data.get("extractionMode") or data.get("extraction_mode")):
        data.pop("extraction_mode", None)
        data["extractionMode"] = ExtractionMode.AUTO_APPLY

    return FieldExtractionConfig.model_validate(data)


def ensure_required_configs(
    configs: Iterable[FieldExtractionConfig],
    fields: Iterable[FieldDescriptor],
    preferences: ExtractionPreferences | None = None,
) -> list[FieldExtractionConfig]:
    """Keep every existing config and add defaults for unconfigured required fields."""
    result = list(configs)
    configured = {c.jira_field_id for c in result}
    for field in fields:
        if field.required and field.id not in configured:
            result.append(default_config_for(field, preferences))
            configured.add(field.id)
    return result
