"""Usage categories for the field discovery view."""

from __future__ import annotations

from pydantic import BaseModel

from jira_field_engine.models.fields import FieldDescriptor

_COMMON_FIELD_IDS = {
    "assignee",
    "priority",
    "fixVersions",
    "components",
    "labels",
    "duedate",
    "customfield_10000",  # Story Points
    "customfield_10001",  # Epic Name
    "customfield_10002",  # Epic Link
}

_COMMON_FIELD_NAMES = (
    "story points",
    "assignee",
    "priority",
    "labels",
    "component",
    "fix version",
    "due date",
    "epic",
    "sprint",
)

_SYSTEM_FIELD_IDS = {
    "created",
    "updated",
    "creator",
    "reporter",
    "status",
    "resolution",
    "resolutiondate",
    "worklog",
    "attachment",
    "comment",
    "issuelinks",
    "subtasks",
    "parent",
    "project",
    "issuetype",
}


class FieldCategories(BaseModel):
    commonly_used: list[FieldDescriptor] = []
    project_specific: list[FieldDescriptor] = []
    optional_standard: list[FieldDescriptor] = []
    system_fields: list[FieldDescriptor] = []


class FieldUsageStats(BaseModel):
    usage_percentage: int
    is_popular: bool


def is_commonly_used(field: FieldDescriptor) -> bool:
    name = field.name.lower()
    return field.id in _COMMON_FIELD_IDS or any(common in name for common in _COMMON_FIELD_NAMES)


def is_project_specific(field: FieldDescriptor) -> bool:
    return field.id.startswith("customfield_") and not is_commonly_used(field)


def is_system_field(field: FieldDescriptor) -> bool:
    return field.id in _SYSTEM_FIELD_IDS or "time" in field.id or "log" in field.id


def categorize_fields(fields: list[FieldDescriptor]) -> FieldCategories:
    """Split fields into discovery categories.

    Commonly-used, project-specific and system membership are evaluated
    independently, so a field can appear in more than one of those lists;
    optional_standard holds everything that matched none of them.
    """
    commonly_used = [f for f in fields if is_commonly_used(f)]
    project_specific = [f for f in fields if is_project_specific(f)]
    system_fields = [f for f in fields if is_system_field(f)]
    claimed = {f.id for f in (*commonly_used, *project_specific, *system_fields)}
    optional_standard = [f for f in fields if f.id not in claimed]

    return FieldCategories(
        commonly_used=commonly_used,
        project_specific=project_specific,
        optional_standard=optional_standard,
        system_fields=system_fields,
    )


def field_usage_stats(field: FieldDescriptor) -> FieldUsageStats:
    """Heuristic popularity estimate; no analytics source is consulted."""
    usage = 50
    if is_commonly_used(field):
        usage = 85
    elif field.required:
        usage = 95
    elif is_system_field(field):
        usage = 30
    elif is_project_specific(field):
        usage = 40
    return FieldUsageStats(usage_percentage=usage, is_popular=usage > 70)


def search_fields(fields: list[FieldDescriptor], term: str) -> list[FieldDescriptor]:
    """Case-insensitive match on name, id or description. Blank terms match everything."""
    if not term.strip():
        return list(fields)
    needle = term.lower()
    return [
        f
        for f in fields
        if needle in f.name.lower()
        or needle in f.id.lower()
        or (f.description is not None and needle in f.description.lower())
    ]
