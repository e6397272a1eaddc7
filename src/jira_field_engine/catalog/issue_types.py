"""Work-item type to Jira issue type resolution."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from jira_field_engine.models.config import WorkItemType

logger = logging.getLogger(__name__)

# Acceptable issue-type name substrings, tried in order.
ISSUE_TYPE_CANDIDATES: dict[WorkItemType, list[str]] = {
    WorkItemType.ALL: ["Story", "Epic", "Task", "Bug", "Initiative"],
    WorkItemType.STORY: ["Story", "User Story", "Task"],
    WorkItemType.EPIC: ["Epic"],
    WorkItemType.INITIATIVE: ["Initiative", "Epic", "Story"],
    WorkItemType.TASK: ["Task", "Story", "Sub-task"],
    WorkItemType.BUG: ["Bug", "Defect", "Issue"],
}


def resolve_issue_type(
    work_item_type: WorkItemType | str, issue_types: list[Mapping[str, Any]]
) -> Mapping[str, Any] | None:
    """Pick the Jira issue type for a work-item type.

    The first candidate that is a case-insensitive substring of an issue type
    name wins. With no match the first available type is used; with no types
    at all the result is None.
    """
    try:
        kind = WorkItemType(work_item_type)
    except ValueError:
        logger.warning("Unknown work item type %r", work_item_type)
        candidates: list[str] = []
    else:
        candidates = ISSUE_TYPE_CANDIDATES[kind]

    for candidate in candidates:
        needle = candidate.lower()
        for issue_type in issue_types:
            if needle in str(issue_type.get("name", "")).lower():
                return issue_type

    if issue_types:
        logger.info(
            "No issue type matched %s; falling back to %s",
            work_item_type,
            issue_types[0].get("name"),
        )
        return issue_types[0]
    return None
