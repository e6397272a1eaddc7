"""Tests for the rule-based pattern extractor."""

from datetime import date

import pytest

from jira_field_engine.catalog.normalizer import (
    DELIVERY_QUARTER_FIELD_ID,
    INCLUDE_ON_ROADMAP_FIELD_ID,
    quarter_labels,
    to_options,
)
from jira_field_engine.extractors.pattern import (
    PatternExtractor,
    PatternRule,
    current_quarter,
    map_priority,
)
from jira_field_engine.models.extraction import CandidateSource
from jira_field_engine.models.fields import FieldDescriptor, FieldType

TODAY = date(2025, 8, 1)
PRIORITIES = ["Highest", "High", "Medium", "Low", "Lowest"]


def _priority_field(labels: list[str] | None = PRIORITIES) -> FieldDescriptor:
    return FieldDescriptor(
        id="priority",
        name="Priority",
        type=FieldType.SELECT,
        allowed_values=to_options(labels) if labels is not None else None,
    )


def _quarter_field() -> FieldDescriptor:
    return FieldDescriptor(
        id=DELIVERY_QUARTER_FIELD_ID,
        name="Delivery Quarter",
        type=FieldType.SELECT,
        allowed_values=to_options(quarter_labels(TODAY)),
    )


@pytest.fixture
def extractor() -> PatternExtractor:
    return PatternExtractor(today=TODAY)


class TestPriority:
    def test_critical_maps_to_highest(self, extractor: PatternExtractor) -> None:
        candidate = extractor.extract_field("this is urgent and critical", _priority_field())
        assert candidate is not None
        assert candidate.value == "Highest"
        assert candidate.confidence == 0.8
        assert candidate.extraction_method == CandidateSource.PATTERN

    def test_high_prefers_exact_label(self, extractor: PatternExtractor) -> None:
        """Exact label matches are tried before substring matches, so "high"
        picks High even though Highest also contains it."""
        candidate = extractor.extract_field("This is a high priority item", _priority_field())
        assert candidate.value == "High"

    def test_synonym_substring(self) -> None:
        assert map_priority("minor", ["P1 - Blocker", "P4 - Minor"]) == "P4 - Minor"

    def test_no_labels_returns_word(self, extractor: PatternExtractor) -> None:
        candidate = extractor.extract_field("low effort", _priority_field(None))
        assert candidate.value == "low"

    def test_unmappable_word_gives_nothing(self, extractor: PatternExtractor) -> None:
        """A word with no matching label yields no candidate rather than the
        raw word, keeping select values inside the allowed list."""
        field = _priority_field(["P1", "P2"])
        assert extractor.extract_field("a trivial fix", field) is None

    def test_no_priority_word(self, extractor: PatternExtractor) -> None:
        assert extractor.extract_field("Add export to CSV", _priority_field()) is None


class TestQuarter:
    def test_explicit_quarter(self, extractor: PatternExtractor) -> None:
        candidate = extractor.extract_field("Deliver in Q3 2025", _quarter_field())
        assert candidate.value == "Q3 2025"
        assert candidate.confidence == 0.8

    @pytest.mark.parametrize(
        "text",
        ["quarter 1 2026", "1st quarter 2026", "first quarter 2026", "ship it q1 2026"],
    )
    def test_explicit_forms(self, extractor: PatternExtractor, text: str) -> None:
        candidate = extractor.extract_field(text, _quarter_field())
        assert candidate.value == "Q1 2026"
        assert candidate.confidence == 0.8

    def test_bare_quarter_uses_current_year(self, extractor: PatternExtractor) -> None:
        candidate = extractor.extract_field("targeting Q4", _quarter_field())
        assert candidate.value == "Q4 2025"
        assert candidate.confidence == 0.8

    def test_year_only_uses_current_quarter(self, extractor: PatternExtractor) -> None:
        candidate = extractor.extract_field("Part of the 2025 roadmap", _quarter_field())
        assert candidate.value == "Q3 2025"
        assert candidate.confidence == 0.6

    def test_no_hint_uses_current_quarter(self, extractor: PatternExtractor) -> None:
        candidate = extractor.extract_field("Improve search relevance", _quarter_field())
        assert candidate.value == "Q3 2025"
        assert candidate.confidence == 0.4

    def test_only_allowed_values(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(
            id=DELIVERY_QUARTER_FIELD_ID,
            name="Delivery Quarter",
            type=FieldType.SELECT,
            allowed_values=to_options(["Q1 2030"]),
        )
        assert extractor.extract_field("Deliver in Q3 2025", field) is None

    def test_current_quarter(self) -> None:
        assert current_quarter(date(2025, 1, 31)) == 1
        assert current_quarter(date(2025, 8, 1)) == 3
        assert current_quarter(date(2025, 12, 31)) == 4


class TestRoadmap:
    def test_multiselect_both(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(
            id=INCLUDE_ON_ROADMAP_FIELD_ID, name="Include on Roadmap", type=FieldType.MULTISELECT
        )
        candidate = extractor.extract_field("Internal tooling that is also customer facing", field)
        assert candidate.value == ["Internal", "External"]
        assert candidate.confidence == 0.8

    def test_multiselect_internal_only(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(
            id=INCLUDE_ON_ROADMAP_FIELD_ID, name="Include on Roadmap", type=FieldType.MULTISELECT
        )
        candidate = extractor.extract_field("A confidential staff project", field)
        assert candidate.value == ["Internal"]

    def test_multiselect_no_match(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(
            id=INCLUDE_ON_ROADMAP_FIELD_ID, name="Include on Roadmap", type=FieldType.MULTISELECT
        )
        assert extractor.extract_field("Refactor the parser", field) is None

    def test_legacy_scalar(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="customfield_1", name="Roadmap Item", type=FieldType.TEXT)
        candidate = extractor.extract_field("Make this public", field)
        assert candidate.value == "public"


class TestOtherRules:
    def test_story_points(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="customfield_10000", name="Story Points", type=FieldType.NUMBER)
        candidate = extractor.extract_field("Estimated at 8 story points", field)
        assert candidate.value == 8
        assert candidate.confidence == 0.9

    def test_story_points_short_form(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="customfield_10000", name="Story Points", type=FieldType.NUMBER)
        assert extractor.extract_field("about 3 points", field).value == 3

    def test_component(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(
            id="components",
            name="Component/s",
            type=FieldType.MULTISELECT,
            allowed_values=to_options(["Frontend", "Backend"]),
        )
        candidate = extractor.extract_field("Fix the backend cache", field)
        assert candidate.value == "Backend"
        assert candidate.confidence == 0.7

    def test_epic_link_is_case_sensitive(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="customfield_10002", name="Epic Link")
        assert extractor.extract_field("Part of PLAT-123", field).value == "PLAT-123"
        assert extractor.extract_field("part of plat-123", field) is None


class TestLabels:
    def test_stop_words_and_short_words(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="labels", name="Labels", type=FieldType.MULTISELECT)
        candidate = extractor.extract_field("the migration of backend v2", field)
        assert candidate.value == ["migration", "backend"]
        assert candidate.confidence == 0.7

    def test_quarter_codes_and_hashtags(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="labels", name="Labels", type=FieldType.MULTISELECT)
        candidate = extractor.extract_field("Ship api-v2 in 2025Q4 #perf", field)
        assert candidate.value[:3] == ["2025q4", "api-v2", "perf"]

    def test_deduplicated_case_insensitively(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="labels", name="Labels", type=FieldType.MULTISELECT)
        candidate = extractor.extract_field("Search search SEARCH", field)
        assert candidate.value == ["search"]

    def test_nothing_left(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="labels", name="Labels", type=FieldType.MULTISELECT)
        assert extractor.extract_field("the and for", field) is None


class TestPatternExtractor:
    def test_no_rule_for_field(self, extractor: PatternExtractor) -> None:
        field = FieldDescriptor(id="summary", name="Summary")
        assert extractor.rule_for(field) is None
        assert extractor.extract_field("anything high priority", field) is None

    def test_first_matching_rule_owns_field(self, extractor: PatternExtractor) -> None:
        # "Priority Quarter" matches both rules; priority comes first in the table.
        field = FieldDescriptor(id="customfield_1", name="Priority Quarter")
        assert extractor.rule_for(field).name == "priority"

    def test_extract_returns_matches_in_field_order(self, extractor: PatternExtractor) -> None:
        fields = [
            FieldDescriptor(id="summary", name="Summary"),
            FieldDescriptor(id="customfield_10000", name="Story Points", type=FieldType.NUMBER),
            _priority_field(),
        ]
        candidates = extractor.extract("critical fix, 5 points", fields)
        assert [c.field_id for c in candidates] == ["customfield_10000", "priority"]

    def test_custom_rules(self) -> None:
        rule = PatternRule(
            "team",
            lambda field: field.name == "Team",
            lambda text, field, today: None,
        )
        extractor = PatternExtractor(today=TODAY, rules=[rule])
        field = FieldDescriptor(id="customfield_2", name="Team")
        assert extractor.rule_for(field) is rule
        assert extractor.extract_field("platform team", field) is None

    def test_deterministic(self, extractor: PatternExtractor) -> None:
        field = _quarter_field()
        first = extractor.extract_field("the 2025 roadmap", field)
        second = extractor.extract_field("the 2025 roadmap", field)
        assert first == second
