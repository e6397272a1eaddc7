"""Tests for field metadata normalization and error-response inference."""

from datetime import date

from jira_field_engine.catalog.normalizer import (
    DELIVERY_QUARTER_FIELD_ID,
    INCLUDE_ON_ROADMAP_FIELD_ID,
    common_allowed_values,
    format_field_name,
    infer_from_error,
    map_field_type,
    minimal_fields,
    normalize,
    parse_create_meta,
    quarter_labels,
)
from jira_field_engine.models.fields import ChoiceOption, FieldType, PlainOption

TODAY = date(2025, 8, 1)


def _make_create_meta_fields() -> dict:
    return {
        "summary": {"name": "Summary", "required": True, "schema": {"type": "string"}},
        "priority": {
            "name": "Priority",
            "required": False,
            "schema": {"type": "priority"},
            "allowedValues": [
                {"id": "1", "name": "Highest"},
                {"id": "2", "name": "High"},
                {"id": "3", "name": "Medium"},
            ],
        },
        "customfield_26360": {
            "name": "Include on Roadmap",
            "required": True,
            "schema": {"type": "array"},
            "allowedValues": [{"id": "10", "value": "Internal"}, {"id": "11", "value": "External"}],
        },
        "duedate": {"name": "Due Date", "required": False, "schema": {"type": "date"}},
        "customfield_10000": {"name": "Story Points", "schema": {"type": "number"}},
    }


class TestMapFieldType:
    def test_known_types(self) -> None:
        assert map_field_type("string") == FieldType.TEXT
        assert map_field_type("number") == FieldType.NUMBER
        assert map_field_type("datetime") == FieldType.DATE
        assert map_field_type("option") == FieldType.SELECT
        assert map_field_type("array") == FieldType.MULTISELECT
        assert map_field_type("priority") == FieldType.SELECT
        assert map_field_type("user") == FieldType.TEXT

    def test_unknown_is_text(self) -> None:
        assert map_field_type("sd-customerrequesttype") == FieldType.TEXT
        assert map_field_type(None) == FieldType.TEXT
        assert map_field_type(42) == FieldType.TEXT

    def test_case_insensitive(self) -> None:
        assert map_field_type("Number") == FieldType.NUMBER


class TestNormalize:
    def test_create_meta_mapping(self) -> None:
        fields = normalize(_make_create_meta_fields())
        by_id = {f.id: f for f in fields}

        assert by_id["summary"].required is True
        assert by_id["priority"].type == FieldType.SELECT
        assert by_id["priority"].option_labels() == ["Highest", "High", "Medium"]
        assert by_id["customfield_26360"].type == FieldType.MULTISELECT
        assert by_id["customfield_26360"].option_labels() == ["Internal", "External"]
        assert by_id["duedate"].type == FieldType.DATE
        assert by_id["customfield_10000"].type == FieldType.NUMBER
        assert by_id["customfield_10000"].required is False

    def test_required_first_then_alphabetical(self) -> None:
        fields = normalize(_make_create_meta_fields())
        assert [f.name for f in fields] == [
            "Include on Roadmap",
            "Summary",
            "Due Date",
            "Priority",
            "Story Points",
        ]

    def test_field_list_shape(self) -> None:
        fields = normalize(
            [
                {"id": "labels", "name": "Labels", "schema": {"type": "array"}},
                {"key": "customfield_1", "name": "Team", "type": "string"},
                {"fieldId": "priority", "name": "Priority", "fieldType": "select"},
            ]
        )
        assert {f.id for f in fields} == {"labels", "customfield_1", "priority"}
        assert next(f for f in fields if f.id == "priority").type == FieldType.SELECT

    def test_string_and_object_options(self) -> None:
        fields = normalize(
            {
                "customfield_1": {
                    "name": "Mixed",
                    "type": "select",
                    "allowedValues": ["Plain", {"id": "7", "name": "Named"}, 3, None, ""],
                }
            }
        )
        options = fields[0].allowed_values
        assert isinstance(options[0], PlainOption)
        assert isinstance(options[1], ChoiceOption)
        assert fields[0].option_labels() == ["Plain", "Named", "3"]

    def test_tagged_options_keep_their_kind(self) -> None:
        fields = normalize(
            {
                "customfield_1": {
                    "name": "Tier",
                    "type": "select",
                    "allowed_values": [
                        {"kind": "plain", "value": "Gold"},
                        {"kind": "option", "id": "2", "name": "Silver"},
                        {"kind": "plain", "value": ""},
                    ],
                }
            }
        )
        options = fields[0].allowed_values
        assert options == (PlainOption(value="Gold"), ChoiceOption(id="2", name="Silver"))

    def test_missing_name_falls_back_to_standard_name(self) -> None:
        fields = normalize({"fixVersions": {"schema": {"type": "array"}}})
        assert fields[0].name == "Fix Version/s"

    def test_missing_type_is_text(self) -> None:
        fields = normalize({"customfield_1": {"name": "Team"}})
        assert fields[0].type == FieldType.TEXT

    def test_skips_malformed_entries(self) -> None:
        fields = normalize({"summary": {"name": "Summary"}, "broken": "not-a-mapping"})
        assert [f.id for f in fields] == ["summary"]

    def test_empty_input(self) -> None:
        assert normalize(None) == []
        assert normalize({}) == []
        assert normalize([]) == []

    def test_idempotent(self) -> None:
        raw = _make_create_meta_fields()
        assert normalize(raw) == normalize(raw)


class TestParseCreateMeta:
    def test_projects_envelope(self) -> None:
        payload = {"projects": [{"issuetypes": [{"fields": _make_create_meta_fields()}]}]}
        assert len(parse_create_meta(payload)) == 5

    def test_paginated_values_envelope(self) -> None:
        payload = {
            "values": [
                {"fieldId": "summary", "name": "Summary", "required": True, "schema": {"type": "string"}}
            ]
        }
        fields = parse_create_meta(payload)
        assert fields[0].id == "summary"
        assert fields[0].required is True

    def test_empty_projects(self) -> None:
        assert parse_create_meta({"projects": []}) == []
        assert parse_create_meta({"projects": [{"issuetypes": []}]}) == []

    def test_not_a_mapping(self) -> None:
        assert parse_create_meta(["summary"]) == []


class TestQuarterLabels:
    def test_current_and_next_year(self) -> None:
        assert quarter_labels(TODAY) == [
            "Q1 2025",
            "Q2 2025",
            "Q3 2025",
            "Q4 2025",
            "Q1 2026",
            "Q2 2026",
            "Q3 2026",
            "Q4 2026",
        ]


class TestCommonAllowedValues:
    def test_known_fields(self) -> None:
        assert common_allowed_values(DELIVERY_QUARTER_FIELD_ID, "x", TODAY)[0] == "Q1 2025"
        assert common_allowed_values(INCLUDE_ON_ROADMAP_FIELD_ID, "x") == ["Internal", "External"]
        assert common_allowed_values("issuetype", "Issue Type") == [
            "Epic",
            "Story",
            "Task",
            "Bug",
            "Initiative",
        ]
        assert common_allowed_values("priority", "Priority")[0] == "Highest"

    def test_yes_no_needs_whole_word(self) -> None:
        assert common_allowed_values("customfield_1", "Yes or No") == ["Yes", "No"]
        assert common_allowed_values("customfield_1", "Notes") is None

    def test_unknown(self) -> None:
        assert common_allowed_values("customfield_1", "Team") is None


class TestFormatFieldName:
    def test_standard_and_custom(self) -> None:
        assert format_field_name("duedate") == "Due Date"
        assert format_field_name("environment") == "Environment"


class TestInferFromError:
    def test_errors_mapping(self) -> None:
        fields = infer_from_error(
            {
                "errors": {
                    "customfield_26362": "Delivery Quarter is required.",
                    "customfield_26360": "Include on Roadmap is required",
                    "summary": "Summary must be shorter than 255 characters",
                }
            },
            today=TODAY,
        )
        by_id = {f.id: f for f in fields}

        assert set(by_id) == {"customfield_26362", "customfield_26360"}
        quarter = by_id["customfield_26362"]
        assert quarter.name == "Delivery Quarter"
        assert quarter.type == FieldType.SELECT
        assert quarter.required is True
        assert quarter.option_labels()[2] == "Q3 2025"
        roadmap = by_id["customfield_26360"]
        assert roadmap.type == FieldType.MULTISELECT
        assert roadmap.option_labels() == ["Internal", "External"]

    def test_error_messages_list(self) -> None:
        fields = infer_from_error(
            {"errorMessages": ["Field 'Team' is required", 'Field "Sprint Goal" is required']}
        )
        assert [f.id for f in fields] == ["Team", "Sprint Goal"]
        assert all(f.required for f in fields)

    def test_bare_string(self) -> None:
        fields = infer_from_error("components is required")
        assert [f.id for f in fields] == ["components"]

    def test_bare_list(self) -> None:
        fields = infer_from_error(["duedate is required", "not an error"])
        assert [f.id for f in fields] == ["duedate"]
        assert fields[0].type == FieldType.DATE

    def test_deduplicates_across_sources(self) -> None:
        fields = infer_from_error(
            {
                "errors": {"priority": "Priority is required"},
                "errorMessages": ["priority is required"],
            }
        )
        assert [f.id for f in fields] == ["priority"]
        assert fields[0].name == "Priority"
        assert fields[0].option_labels()[0] == "Highest"

    def test_description_mentions_message(self) -> None:
        fields = infer_from_error({"errors": {"labels": "Labels is required"}})
        assert "Labels is required" in fields[0].description

    def test_fallback_to_minimal_fields(self) -> None:
        for payload in (None, {}, "", [], {"errors": {"summary": "too long"}}, 42):
            fields = infer_from_error(payload)
            assert [f.id for f in fields] == ["summary", "description", "issuetype", "project"]

    def test_minimal_fields(self) -> None:
        fields = {f.id: f for f in minimal_fields()}
        assert fields["summary"].required is True
        assert fields["description"].required is False
        assert fields["description"].type == FieldType.TEXTAREA
        assert fields["issuetype"].option_labels() == ["Epic", "Story", "Task", "Bug", "Initiative"]
