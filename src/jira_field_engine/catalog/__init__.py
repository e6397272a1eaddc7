"""Field catalog: normalization, inference, categorization and discovery."""

from jira_field_engine.catalog.categories import (
    FieldCategories,
    FieldUsageStats,
    categorize_fields,
    field_usage_stats,
    search_fields,
)
from jira_field_engine.catalog.discovery import (
    FieldMapping,
    MetadataSource,
    ProbeResult,
    discover_fields,
    discover_fields_from_error,
)
from jira_field_engine.catalog.issue_types import resolve_issue_type
from jira_field_engine.catalog.normalizer import (
    infer_from_error,
    map_field_type,
    minimal_fields,
    normalize,
    parse_create_meta,
)

__all__ = [
    "FieldCategories",
    "FieldMapping",
    "FieldUsageStats",
    "MetadataSource",
    "ProbeResult",
    "categorize_fields",
    "discover_fields",
    "discover_fields_from_error",
    "field_usage_stats",
    "infer_from_error",
    "map_field_type",
    "minimal_fields",
    "normalize",
    "parse_create_meta",
    "resolve_issue_type",
    "search_fields",
]
