"""Field discovery orchestration over an injected metadata source.

The transport (Jira REST calls, auth) lives behind ``MetadataSource``. This
module only decides which call to make next and how to recover when one
fails: createmeta first, then a probe creation whose error body is mined by
``infer_from_error``. Nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any, Protocol

from pydantic import BaseModel

from jira_field_engine.catalog.issue_types import resolve_issue_type
from jira_field_engine.catalog.normalizer import infer_from_error, parse_create_meta, to_options
from jira_field_engine.errors import MetadataUnavailable
from jira_field_engine.models.config import WorkItemType
from jira_field_engine.models.fields import FieldDescriptor, FieldType

logger = logging.getLogger(__name__)


class ProbeResult(BaseModel):
    """Outcome of a throwaway issue creation used to learn required fields."""

    ok: bool
    payload: Any = None


class MetadataSource(Protocol):
    async def list_issue_types(self) -> list[dict[str, Any]]: ...

    async def fetch_create_meta(self, issue_type_id: str) -> Mapping[str, Any]: ...

    async def probe_create(self, issue_type_id: str) -> ProbeResult: ...

    async def fetch_field_options(self, field_id: str) -> list[Any]: ...


class FieldMapping(BaseModel):
    work_item_type: WorkItemType
    issue_type: str
    fields: list[FieldDescriptor]
    discovered_at: datetime


async def discover_fields(
    source: MetadataSource,
    work_item_type: WorkItemType,
    *,
    today: date | None = None,
) -> FieldMapping | None:
    """Discover the create-screen fields for a work-item type.

    Returns None only when the target system exposes no issue types at all.
    """
    issue_types = await _list_issue_types(source)
    issue_type = resolve_issue_type(work_item_type, issue_types)
    if issue_type is None:
        logger.warning("No issue type available for %s", work_item_type)
        return None

    issue_type_id = str(issue_type.get("id", ""))
    issue_type_name = str(issue_type.get("name", "Unknown"))
    logger.info("Discovering fields for %s using issue type %s", work_item_type, issue_type_name)

    fields: list[FieldDescriptor] = []
    try:
        fields = parse_create_meta(await source.fetch_create_meta(issue_type_id))
    except MetadataUnavailable as exc:
        logger.warning("Create metadata unavailable for %s: %s", issue_type_name, exc)

    if not fields:
        logger.info("Metadata returned no fields, probing a test creation")
        fields = await _fields_from_probe(source, issue_type_id, today)

    return FieldMapping(
        work_item_type=work_item_type,
        issue_type=issue_type_name,
        fields=fields,
        discovered_at=datetime.now(UTC),
    )


async def discover_fields_from_error(
    source: MetadataSource,
    work_item_type: WorkItemType,
    error_payload: Any,
    *,
    today: date | None = None,
) -> FieldMapping:
    """Rebuild the field set from a failed submission, enriching custom fields
    with their real options where the source can provide them."""
    fields = [
        await _with_live_options(source, field) for field in infer_from_error(error_payload, today)
    ]

    issue_types = await _list_issue_types(source)
    issue_type = resolve_issue_type(work_item_type, issue_types)

    return FieldMapping(
        work_item_type=work_item_type,
        issue_type=str(issue_type.get("name", "Unknown")) if issue_type else "Unknown",
        fields=fields,
        discovered_at=datetime.now(UTC),
    )


async def _list_issue_types(source: MetadataSource) -> list[dict[str, Any]]:
    try:
        return await source.list_issue_types()
    except MetadataUnavailable as exc:
        logger.warning("Issue types unavailable: %s", exc)
        return []


async def _fields_from_probe(
    source: MetadataSource, issue_type_id: str, today: date | None
) -> list[FieldDescriptor]:
    try:
        probe = await source.probe_create(issue_type_id)
    except MetadataUnavailable as exc:
        logger.warning("Probe creation failed: %s", exc)
        return infer_from_error(None, today)

    if probe.ok:
        # Creation went through with only summary and description.
        return [
            FieldDescriptor(id="summary", name="Summary", type=FieldType.TEXT, required=True),
            FieldDescriptor(id="description", name="Description", type=FieldType.TEXTAREA),
        ]
    return infer_from_error(probe.payload, today)


async def _with_live_options(source: MetadataSource, field: FieldDescriptor) -> FieldDescriptor:
    if not field.id.startswith("customfield_"):
        return field
    try:
        raw_options = await source.fetch_field_options(field.id)
    except MetadataUnavailable as exc:
        logger.warning("Could not fetch options for %s: %s", field.id, exc)
        return field

    options = to_options(raw_options)
    if not options:
        return field
    logger.debug("Found %d live options for %s", len(options), field.id)
    return field.model_copy(update={"allowed_values": options})
