"""Field catalog normalizer: raw Jira field metadata to FieldDescriptors.

Two entry points:

* ``normalize`` takes metadata as Jira returns it (createmeta fields mapping,
  or the /field list) and produces sorted descriptors.
* ``infer_from_error`` recovers descriptors from the error body of a failed
  issue creation. It always returns something usable: when nothing can be
  parsed the minimal summary/description/issuetype/project set comes back.

Neither function raises on bad input.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from jira_field_engine.models.fields import (
    ChoiceOption,
    FieldDescriptor,
    FieldOption,
    FieldType,
    PlainOption,
)

logger = logging.getLogger(__name__)

DELIVERY_QUARTER_FIELD_ID = "customfield_26362"
INCLUDE_ON_ROADMAP_FIELD_ID = "customfield_26360"

ISSUE_TYPE_NAMES = ["Epic", "Story", "Task", "Bug", "Initiative"]
PRIORITY_NAMES = ["Highest", "High", "Medium", "Low", "Lowest"]

# Jira schema.type -> normalized type. Already-normalized names map to themselves
# so descriptors that were serialized once can be fed back in.
TYPE_MAP: dict[str, FieldType] = {
    "string": FieldType.TEXT,
    "text": FieldType.TEXT,
    "textarea": FieldType.TEXTAREA,
    "number": FieldType.NUMBER,
    "date": FieldType.DATE,
    "datetime": FieldType.DATE,
    "option": FieldType.SELECT,
    "select": FieldType.SELECT,
    "array": FieldType.MULTISELECT,
    "multiselect": FieldType.MULTISELECT,
    "user": FieldType.TEXT,
    "project": FieldType.TEXT,
    "issuetype": FieldType.SELECT,
    "priority": FieldType.SELECT,
    "resolution": FieldType.SELECT,
    "status": FieldType.SELECT,
}

STANDARD_FIELD_NAMES: dict[str, str] = {
    "summary": "Summary",
    "description": "Description",
    "assignee": "Assignee",
    "reporter": "Reporter",
    "priority": "Priority",
    "issuetype": "Issue Type",
    "project": "Project",
    "fixVersions": "Fix Version/s",
    "versions": "Affects Version/s",
    "components": "Component/s",
    "labels": "Labels",
    "duedate": "Due Date",
    "resolution": "Resolution",
    "status": "Status",
    "created": "Created",
    "updated": "Updated",
    "resolutiondate": "Resolved",
    "worklog": "Work Log",
    "attachment": "Attachment",
    "comment": "Comments",
    "issuelinks": "Linked Issues",
    "subtasks": "Sub-tasks",
    "parent": "Parent",
    "customfield_10000": "Story Points",
    "customfield_10001": "Epic Name",
    "customfield_10002": "Epic Link",
}

# Ordered: the first pattern that names a field wins for that span of text.
_REQUIRED_MESSAGE_PATTERNS = [
    re.compile(r"Field '([^']+)' is required", re.IGNORECASE),
    re.compile(r"([a-zA-Z_][a-zA-Z0-9_]*) is required", re.IGNORECASE),
    re.compile(r'"([^"]+)" is required', re.IGNORECASE),
]
_NAME_FROM_MESSAGE = re.compile(r"^([^.]+) is required", re.IGNORECASE)

_TYPE_KEYS = ("type", "fieldType", "field_type")
_REQUIRED_KEYS = ("required", "isRequired", "is_required")
_ALLOWED_KEYS = ("allowedValues", "allowed_values", "options")


def map_field_type(raw_type: Any) -> FieldType:
    """Table lookup; anything unknown (including non-strings) is text."""
    if not isinstance(raw_type, str):
        return FieldType.TEXT
    return TYPE_MAP.get(raw_type.strip().lower(), FieldType.TEXT)


def to_option(raw: Any) -> FieldOption | None:
    """Resolve one raw allowed value into the tagged option union."""
    if isinstance(raw, str):
        return PlainOption(value=raw) if raw else None
    if isinstance(raw, Mapping):
        if raw.get("kind") == "plain":
            value = _str_or_none(raw.get("value"))
            return PlainOption(value=value) if value else None
        option = ChoiceOption(
            id=_str_or_none(raw.get("id")),
            name=_str_or_none(raw.get("name")),
            value=_str_or_none(raw.get("value")),
        )
        return option if option.label else None
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int | float):
        return PlainOption(value=str(raw))
    return None


def to_options(raw_values: Any) -> tuple[FieldOption, ...] | None:
    if not isinstance(raw_values, list | tuple):
        return None
    options = [opt for opt in (to_option(v) for v in raw_values) if opt is not None]
    return tuple(options)


def format_field_name(field_id: str) -> str:
    if field_id in STANDARD_FIELD_NAMES:
        return STANDARD_FIELD_NAMES[field_id]
    return field_id[:1].upper() + field_id[1:]


def sort_fields(fields: Iterable[FieldDescriptor]) -> list[FieldDescriptor]:
    """Required first, then alphabetical by display name."""
    return sorted(fields, key=lambda f: (not f.required, f.name.casefold(), f.name))


def normalize(raw_fields: Mapping[str, Any] | list[Any] | None) -> list[FieldDescriptor]:
    """Turn raw field metadata into sorted FieldDescriptors.

    Accepts a mapping of field id to metadata (createmeta shape) or a list of
    metadata objects carrying their own ``id``/``key``/``fieldId`` (the /field
    endpoint). Entries that cannot be interpreted are skipped.
    """
    if not raw_fields:
        return []

    if isinstance(raw_fields, Mapping):
        items = list(raw_fields.items())
    elif isinstance(raw_fields, list):
        items = []
        for entry in raw_fields:
            if isinstance(entry, Mapping):
                field_id = entry.get("fieldId") or entry.get("id") or entry.get("key")
                items.append((field_id, entry))
    else:
        logger.warning("Unsupported field metadata container: %s", type(raw_fields).__name__)
        return []

    fields: list[FieldDescriptor] = []
    for field_id, info in items:
        if not isinstance(field_id, str) or not field_id or not isinstance(info, Mapping):
            logger.warning("Skipping malformed field metadata entry: %r", field_id)
            continue
        fields.append(_descriptor_from_metadata(field_id, info))

    return sort_fields(fields)


def _descriptor_from_metadata(field_id: str, info: Mapping[str, Any]) -> FieldDescriptor:
    schema = info.get("schema")
    raw_type: Any = None
    if isinstance(schema, Mapping):
        raw_type = schema.get("type")
    if raw_type is None:
        raw_type = _first_present(info, _TYPE_KEYS)

    allowed_raw = _first_present(info, _ALLOWED_KEYS)
    description = info.get("description")

    return FieldDescriptor(
        id=field_id,
        name=_str_or_none(info.get("name")) or STANDARD_FIELD_NAMES.get(field_id, field_id),
        type=map_field_type(raw_type if raw_type is not None else "string"),
        required=bool(_first_present(info, _REQUIRED_KEYS)),
        allowed_values=to_options(allowed_raw),
        description=description if isinstance(description, str) and description else None,
    )


def parse_create_meta(payload: Any) -> list[FieldDescriptor]:
    """Unwrap a createmeta response and normalize the fields it carries.

    Handles the expanded ``projects[0].issuetypes[0].fields`` envelope as well
    as the paginated ``{"fields": [...]}`` / ``{"values": [...]}`` shapes.
    """
    if not isinstance(payload, Mapping):
        return []

    projects = payload.get("projects")
    if isinstance(projects, list) and projects:
        issue_types = projects[0].get("issuetypes") if isinstance(projects[0], Mapping) else None
        if isinstance(issue_types, list) and issue_types and isinstance(issue_types[0], Mapping):
            return normalize(issue_types[0].get("fields") or {})
        return []

    for key in ("fields", "values"):
        if key in payload:
            return normalize(payload[key])
    return []


# ---------------------------------------------------------------------------
# Error-response inference
# ---------------------------------------------------------------------------


def guess_field_type(field_id: str) -> FieldType:
    if field_id == DELIVERY_QUARTER_FIELD_ID:
        return FieldType.SELECT
    if field_id == INCLUDE_ON_ROADMAP_FIELD_ID:
        return FieldType.MULTISELECT

    lowered = field_id.lower()
    if "date" in lowered or "time" in lowered:
        return FieldType.DATE
    if "number" in lowered or "point" in lowered:
        return FieldType.NUMBER
    if "priority" in lowered or "status" in lowered or "type" in lowered:
        return FieldType.SELECT
    if "description" in lowered or "comment" in lowered:
        return FieldType.TEXTAREA
    if "roadmap" in lowered or "include" in lowered or "quarter" in lowered:
        return FieldType.SELECT
    return FieldType.TEXT


def quarter_labels(today: date | None = None) -> list[str]:
    """Q1..Q4 of the current year followed by Q1..Q4 of the next."""
    year = (today or date.today()).year
    return [f"Q{q} {y}" for y in (year, year + 1) for q in range(1, 5)]


def common_allowed_values(
    field_id: str, field_name: str, today: date | None = None
) -> list[str] | None:
    """Synthesized allowed values for well-known fields discovered without metadata."""
    name = field_name.lower()

    if field_id == DELIVERY_QUARTER_FIELD_ID or "quarter" in name:
        return quarter_labels(today)
    if field_id == INCLUDE_ON_ROADMAP_FIELD_ID or "roadmap" in name:
        return ["Internal", "External"]
    if field_id == "issuetype" or "issue type" in name:
        return list(ISSUE_TYPE_NAMES)
    if field_id == "priority" or "priority" in name:
        return list(PRIORITY_NAMES)
    if re.search(r"\b(yes|no)\b", name) or "include" in name:
        return ["Yes", "No"]
    return None


def minimal_fields() -> list[FieldDescriptor]:
    """The fields every Jira create screen has; used when discovery yields nothing."""
    return [
        FieldDescriptor(id="summary", name="Summary", type=FieldType.TEXT, required=True),
        FieldDescriptor(
            id="description", name="Description", type=FieldType.TEXTAREA, required=False
        ),
        FieldDescriptor(
            id="issuetype",
            name="Issue Type",
            type=FieldType.SELECT,
            required=True,
            allowed_values=to_options(ISSUE_TYPE_NAMES),
        ),
        FieldDescriptor(id="project", name="Project", type=FieldType.SELECT, required=True),
    ]


def infer_from_error(payload: Any, today: date | None = None) -> list[FieldDescriptor]:
    """Infer required fields from a failed creation response.

    ``payload`` may be a Jira error body (``errors`` mapping of field id to
    message and/or ``errorMessages`` list), a bare list of messages, or a raw
    string. Results are deduplicated by field id in discovery order.
    """
    fields: dict[str, FieldDescriptor] = {}

    if isinstance(payload, Mapping):
        errors = payload.get("errors")
        if isinstance(errors, Mapping):
            for field_id, message in errors.items():
                if not isinstance(field_id, str) or not isinstance(message, str):
                    continue
                if "required" not in message.lower() or field_id in fields:
                    continue
                name = format_field_name(field_id)
                match = _NAME_FROM_MESSAGE.match(message)
                if match:
                    name = match.group(1)
                fields[field_id] = _inferred_descriptor(field_id, name, message, today)

        messages = payload.get("errorMessages")
        if isinstance(messages, list):
            for message in messages:
                if isinstance(message, str):
                    _scan_message(message, fields, today)
    elif isinstance(payload, list):
        for message in payload:
            if isinstance(message, str):
                _scan_message(message, fields, today)
    elif isinstance(payload, str):
        _scan_message(payload, fields, today)

    if not fields:
        logger.info("No required fields found in error payload; using minimal field set")
        return minimal_fields()

    logger.info("Inferred %d required fields from error payload", len(fields))
    return list(fields.values())


def _scan_message(
    message: str, fields: dict[str, FieldDescriptor], today: date | None
) -> None:
    for pattern in _REQUIRED_MESSAGE_PATTERNS:
        for match in pattern.finditer(message):
            field_id = match.group(1)
            if field_id and field_id not in fields:
                fields[field_id] = _inferred_descriptor(field_id, field_id, message, today)


def _inferred_descriptor(
    field_id: str, name: str, message: str, today: date | None
) -> FieldDescriptor:
    allowed = common_allowed_values(field_id, name, today)
    return FieldDescriptor(
        id=field_id,
        name=name,
        type=guess_field_type(field_id),
        required=True,
        allowed_values=to_options(allowed) if allowed else None,
        description=f"Required field discovered from error: {message}",
    )


def _first_present(info: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in info and info[key] is not None:
            return info[key]
    return None


def _str_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
