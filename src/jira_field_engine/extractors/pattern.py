"""Deterministic, field-type-keyed heuristics for pulling values out of text.

Each rule is a ``(applies, extract)`` pair. Rules are evaluated in table
order and the first rule whose ``applies`` accepts the field owns it, even if
its ``extract`` then finds nothing. A rule that finds nothing returns None;
there are no zero-confidence candidates.

The only time-dependent behaviour is the quarter fallback, which reads the
``today`` date handed to the extractor.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import date
from typing import Any, NamedTuple

from jira_field_engine.catalog.normalizer import (
    DELIVERY_QUARTER_FIELD_ID,
    INCLUDE_ON_ROADMAP_FIELD_ID,
)
from jira_field_engine.models.extraction import CandidateSource, ExtractionCandidate
from jira_field_engine.models.fields import FieldDescriptor, FieldType

logger = logging.getLogger(__name__)


class Hit(NamedTuple):
    value: Any
    confidence: float


class PatternRule(NamedTuple):
    name: str
    applies: Callable[[FieldDescriptor], bool]
    extract: Callable[[str, FieldDescriptor, date], Hit | None]


# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------

_PRIORITY_WORD = re.compile(r"\b(highest|high|medium|low|lowest|critical|major|minor|trivial)\b")

# Canonical level -> strings an allowed value may contain for that level.
PRIORITY_SYNONYMS: dict[str, list[str]] = {
    "highest": ["highest", "critical", "1"],
    "high": ["high", "major", "2"],
    "medium": ["medium", "normal", "3"],
    "low": ["low", "minor", "4"],
    "lowest": ["lowest", "trivial", "5"],
}


def _priority_level(word: str) -> str:
    for level, synonyms in PRIORITY_SYNONYMS.items():
        if word == level or word in synonyms:
            return level
    return word


def map_priority(word: str, labels: list[str]) -> str | None:
    """Map a priority word onto the field's allowed labels.

    Exact (case-insensitive) matches are tried before substring matches, so
    "high" resolves to "High" rather than "Highest". A word that matches no
    label gives None instead of the raw word, so a select field never gets a
    value outside its allowed list.
    """
    if not labels:
        return word
    for synonym in PRIORITY_SYNONYMS.get(_priority_level(word), [word]):
        for label in labels:
            if label.lower() == synonym:
                return label
        for label in labels:
            if synonym in label.lower():
                return label
    return None


def _is_priority(field: FieldDescriptor) -> bool:
    return "priority" in field.name.lower()


def extract_priority(text: str, field: FieldDescriptor, today: date) -> Hit | None:
    match = _PRIORITY_WORD.search(text.lower())
    if not match:
        return None
    value = map_priority(match.group(1), field.option_labels())
    return Hit(value, 0.8) if value is not None else None


# ---------------------------------------------------------------------------
# Quarter
# ---------------------------------------------------------------------------

# Ordered from most to least specific. Bare forms take the current year.
_QUARTER_PATTERNS = [
    re.compile(r"\b(q[1-4])\s*(\d{4})\b", re.IGNORECASE),
    re.compile(r"\bquarter\s*([1-4])\s*(\d{4})\b", re.IGNORECASE),
    re.compile(r"\b([1-4])(?:st|nd|rd|th)\s*quarter\s*(\d{4})\b", re.IGNORECASE),
    re.compile(r"\b(first|second|third|fourth)\s*quarter\s*(\d{4})\b", re.IGNORECASE),
    re.compile(r"\b(q[1-4])\b", re.IGNORECASE),
    re.compile(r"\bquarter\s*([1-4])\b", re.IGNORECASE),
]
_QUARTER_WORDS = {"first": "1", "second": "2", "third": "3", "fourth": "4"}
_YEAR = re.compile(r"\b(\d{4})\b")


def current_quarter(today: date) -> int:
    return (today.month - 1) // 3 + 1


def _quarter_number(token: str) -> str:
    token = token.lower()
    if token in _QUARTER_WORDS:
        return _QUARTER_WORDS[token]
    if token.startswith("q"):
        return token[1:]
    return token


def _is_quarter(field: FieldDescriptor) -> bool:
    return "quarter" in field.name.lower() or field.id == DELIVERY_QUARTER_FIELD_ID


def extract_quarter(text: str, field: FieldDescriptor, today: date) -> Hit | None:
    """Explicit quarter (0.8), else year + current quarter (0.6), else the
    current quarter of the current year (0.4). Every step only accepts a
    value that is one of the field's allowed labels."""
    for pattern in _QUARTER_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        quarter = _quarter_number(match.group(1))
        year = match.group(2) if match.lastindex and match.lastindex >= 2 else str(today.year)
        candidate = f"Q{quarter} {year}"
        if field.has_option(candidate):
            return Hit(candidate, 0.8)

    year_match = _YEAR.search(text)
    if year_match:
        candidate = f"Q{current_quarter(today)} {year_match.group(1)}"
        if field.has_option(candidate):
            return Hit(candidate, 0.6)

    candidate = f"Q{current_quarter(today)} {today.year}"
    if field.has_option(candidate):
        return Hit(candidate, 0.4)
    return None


# ---------------------------------------------------------------------------
# Roadmap visibility
# ---------------------------------------------------------------------------

_INTERNAL_WORDS = re.compile(r"\b(internal|private|confidential|company|team|staff)\b")
_EXTERNAL_WORDS = re.compile(r"\b(external|public|customer|client|visible|roadmap|showcase)\b")
_LEGACY_ROADMAP_WORDS = re.compile(r"\b(roadmap|public|external|visible|show)\b")


def _is_roadmap(field: FieldDescriptor) -> bool:
    name = field.name.lower()
    return "roadmap" in name or "include" in name or field.id == INCLUDE_ON_ROADMAP_FIELD_ID


def extract_roadmap(text: str, field: FieldDescriptor, today: date) -> Hit | None:
    lowered = text.lower()
    if field.id == INCLUDE_ON_ROADMAP_FIELD_ID or field.type == FieldType.MULTISELECT:
        values: list[str] = []
        if _INTERNAL_WORDS.search(lowered):
            values.append("Internal")
        if _EXTERNAL_WORDS.search(lowered):
            values.append("External")
        return Hit(values, 0.8) if values else None

    match = _LEGACY_ROADMAP_WORDS.search(lowered)
    return Hit(match.group(0), 0.8) if match else None


# ---------------------------------------------------------------------------
# Story points, components, epic link
# ---------------------------------------------------------------------------

_STORY_POINTS = re.compile(r"\b(\d+)\s*(?:story\s*)?points?\b", re.IGNORECASE)
_ISSUE_KEY = re.compile(r"\b([A-Z]+-\d+)\b")


def _is_story_points(field: FieldDescriptor) -> bool:
    name = field.name.lower()
    return "story" in name and "point" in name


def extract_story_points(text: str, field: FieldDescriptor, today: date) -> Hit | None:
    match = _STORY_POINTS.search(text)
    return Hit(int(match.group(1)), 0.9) if match else None


def _is_component(field: FieldDescriptor) -> bool:
    return "component" in field.name.lower()


def extract_component(text: str, field: FieldDescriptor, today: date) -> Hit | None:
    lowered = text.lower()
    for label in field.option_labels():
        if label.lower() in lowered:
            return Hit(label, 0.7)
    return None


def _is_epic(field: FieldDescriptor) -> bool:
    return "epic" in field.name.lower()


def extract_epic_link(text: str, field: FieldDescriptor, today: date) -> Hit | None:
    match = _ISSUE_KEY.search(text)
    return Hit(match.group(1), 0.8) if match else None


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

_LABEL_PATTERNS = [
    # Quarter labels: 2025Q1, 2025q4ac
    re.compile(r"\b(20\d{2}[qQ]\d[a-zA-Z]*)\b"),
    # Project codes: epic-migration, api-v2
    re.compile(r"\b([a-z]+-[a-z0-9-]+)\b"),
    # Explicit prefixes: label:, tag:, #hashtag
    re.compile(r"(?:label|tag|#)\s*[:\s]*([a-zA-Z0-9_-]+)", re.IGNORECASE),
    # Plain alphanumeric words of three or more characters
    re.compile(r"\b([a-zA-Z0-9]{3,}(?:[a-zA-Z0-9_-]*[a-zA-Z0-9])?)\b"),
]

LABEL_STOP_WORDS = frozenset(
    """
    the and for are but not you all can had her was one our out day get has him his how
    its may new now old see two way who boy did man end why let put say she too use
    that with have this will your from they know want been good much some time very
    when come here just like long make many over such take than them well were what
    would there could other after first never these think where being every great
    might shall still those under while years before should through system process
    project service feature design development implementation management application
    solution
    """.split()
)


def _is_labels(field: FieldDescriptor) -> bool:
    return "label" in field.name.lower()


def extract_labels(text: str, field: FieldDescriptor, today: date) -> Hit | None:
    labels: list[str] = []
    seen: set[str] = set()
    for pattern in _LABEL_PATTERNS:
        for match in pattern.finditer(text):
            label = match.group(1)
            if not label or len(label) < 3 or label.lower() in LABEL_STOP_WORDS:
                continue
            folded = label.lower()
            if folded not in seen:
                seen.add(folded)
                labels.append(folded)

    if not labels:
        logger.debug("No labels found for %s", field.name)
        return None
    logger.debug("Labels for %s: %s", field.name, labels)
    return Hit(labels, 0.7)


DEFAULT_RULES: list[PatternRule] = [
    PatternRule("priority", _is_priority, extract_priority),
    PatternRule("quarter", _is_quarter, extract_quarter),
    PatternRule("roadmap", _is_roadmap, extract_roadmap),
    PatternRule("story_points", _is_story_points, extract_story_points),
    PatternRule("component", _is_component, extract_component),
    PatternRule("epic_link", _is_epic, extract_epic_link),
    PatternRule("labels", _is_labels, extract_labels),
]


class PatternExtractor:
    """Runs the rule table over text for each field.

    ``today`` pins the clock used by the quarter fallback; when omitted the
    system date is read on every call.
    """

    def __init__(
        self,
        today: date | None = None,
        rules: list[PatternRule] | None = None,
    ) -> None:
        self._today = today
        self._rules = rules if rules is not None else DEFAULT_RULES

    def rule_for(self, field: FieldDescriptor) -> PatternRule | None:
        for rule in self._rules:
            if rule.applies(field):
                return rule
        return None

    def extract_field(self, text: str, field: FieldDescriptor) -> ExtractionCandidate | None:
        rule = self.rule_for(field)
        if rule is None:
            return None

        hit = rule.extract(text, field, self._today or date.today())
        if hit is None:
            return None

        logger.debug("Rule %s matched %s -> %r (%.2f)", rule.name, field.id, hit.value, hit.confidence)
        return ExtractionCandidate(
            field_id=field.id,
            value=hit.value,
            confidence=hit.confidence,
            extraction_method=CandidateSource.PATTERN,
        )

    def extract(self, text: str, fields: list[FieldDescriptor]) -> list[ExtractionCandidate]:
        """One candidate per field that matched, in field order."""
        candidates: list[ExtractionCandidate] = []
        for field in fields:
            candidate = self.extract_field(text, field)
            if candidate is not None:
                candidates.append(candidate)
        return candidates
