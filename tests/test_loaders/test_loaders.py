"""Tests for loading metadata and extraction configs from disk."""

import json
from pathlib import Path

import yaml

from jira_field_engine.loaders import (
    extraction_config_from_dict,
    load_extraction_config,
    load_field_metadata,
)
from jira_field_engine.models.config import ExtractionMethod, ExtractionMode
from jira_field_engine.models.fields import ChoiceOption, FieldDescriptor, FieldType, PlainOption


class TestLoadExtractionConfig:
    def test_camel_case_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "story.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "fieldExtractionConfig": [
                        {"jiraFieldId": "priority", "extractionMethod": "pattern"},
                        {
                            "jiraFieldId": "labels",
                            "autoApply": False,
                            "confirmationRequired": True,
                        },
                    ],
                    "extractionPreferences": {"requireConfirmationForAll": True},
                }
            )
        )
        document = load_extraction_config(path)

        assert [c.jira_field_id for c in document.field_configs] == ["priority", "labels"]
        assert document.field_configs[0].extraction_method == ExtractionMethod.PATTERN
        assert document.field_configs[0].extraction_mode == ExtractionMode.AUTO_APPLY
        assert document.field_configs[1].extraction_mode == ExtractionMode.ALWAYS_CONFIRM
        assert document.preferences.require_confirmation_for_all is True

    def test_snake_case_json(self, tmp_path: Path) -> None:
        path = tmp_path / "story.json"
        path.write_text(
            json.dumps(
                {
                    "field_configs": [{"jira_field_id": "summary", "extraction_enabled": False}],
                    "preferences": {"global_confidence_threshold": 0.9},
                }
            )
        )
        document = load_extraction_config(path)

        assert document.field_configs[0].extraction_enabled is False
        assert document.preferences.global_confidence_threshold == 0.9

    def test_empty_document(self) -> None:
        document = extraction_config_from_dict(None)
        assert document.field_configs == []
        assert document.preferences.default_method == ExtractionMethod.AI


class TestLoadFieldMetadata:
    def test_create_meta_envelope(self, tmp_path: Path) -> None:
        path = tmp_path / "meta.json"
        path.write_text(
            json.dumps(
                {
                    "projects": [
                        {
                            "issuetypes": [
                                {
                                    "fields": {
                                        "summary": {
                                            "name": "Summary",
                                            "required": True,
                                            "schema": {"type": "string"},
                                        }
                                    }
                                }
                            ]
                        }
                    ]
                }
            )
        )
        fields = load_field_metadata(path)
        assert [f.id for f in fields] == ["summary"]

    def test_field_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "fields.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "priority": {
                        "name": "Priority",
                        "type": "select",
                        "allowedValues": ["High", "Low"],
                    }
                }
            )
        )
        fields = load_field_metadata(path)
        assert fields[0].option_labels() == ["High", "Low"]

    def test_saved_descriptors_reload_unchanged(self, tmp_path: Path) -> None:
        saved = [
            FieldDescriptor(
                id="customfield_26360",
                name="Include on Roadmap",
                type=FieldType.MULTISELECT,
                required=True,
                allowed_values=(
                    PlainOption(value="Internal"),
                    ChoiceOption(id="2", value="External"),
                ),
                description="Where the item appears",
            ),
            FieldDescriptor(id="customfield_10000", name="Story Points", type=FieldType.NUMBER),
        ]
        path = tmp_path / "fields.json"
        path.write_text(json.dumps([field.model_dump(mode="json") for field in saved]))

        assert load_field_metadata(path) == saved
