"""Load field metadata and extraction configs from YAML or JSON files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from jira_field_engine.catalog.normalizer import normalize, parse_create_meta
from jira_field_engine.models.config import ExtractionPreferences, FieldExtractionConfig
from jira_field_engine.models.fields import FieldDescriptor
from jira_field_engine.policy.defaults import migrate_legacy_config


class ExtractionConfigDocument(BaseModel):
    """The per-work-item-type extraction section of a template."""

    field_configs: list[FieldExtractionConfig] = []
    preferences: ExtractionPreferences = ExtractionPreferences()


def _read(path: Path) -> Any:
    # YAML is a superset of JSON, so one parser covers both formats.
    return yaml.safe_load(path.read_text())


def load_field_metadata(path: Path) -> list[FieldDescriptor]:
    """Read a createmeta response, a /field listing, or saved descriptors."""
    data = _read(path)
    if isinstance(data, dict) and ("projects" in data or "values" in data or "fields" in data):
        return parse_create_meta(data)
    return normalize(data)


def extraction_config_from_dict(data: Any) -> ExtractionConfigDocument:
    if not isinstance(data, dict):
        return ExtractionConfigDocument()

    raw_configs = data.get("fieldExtractionConfig", data.get("field_configs")) or []
    raw_prefs = data.get("extractionPreferences", data.get("preferences")) or {}

    return ExtractionConfigDocument(
        field_configs=[migrate_legacy_config(entry) for entry in raw_configs],
        preferences=ExtractionPreferences.model_validate(raw_prefs),
    )


def load_extraction_config(path: Path) -> ExtractionConfigDocument:
    return extraction_config_from_dict(_read(path))
