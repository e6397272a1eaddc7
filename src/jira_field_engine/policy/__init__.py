"""Extraction policy: per-field config resolution and bucket classification."""

from jira_field_engine.policy.defaults import (
    config_for_discovered,
    default_config_for,
    default_extraction_method,
    default_extraction_mode,
    ensure_required_configs,
    migrate_legacy_config,
)
from jira_field_engine.policy.engine import ExtractionPolicyEngine

__all__ = [
    "ExtractionPolicyEngine",
    "config_for_discovered",
    "default_config_for",
    "default_extraction_method",
    "default_extraction_mode",
    "ensure_required_configs",
    "migrate_legacy_config",
]
