"""Field descriptors: the normalized view of one target-system field.

Raw Jira metadata comes in several shapes (createmeta, /field, error
responses). Everything downstream only ever sees a FieldDescriptor, whose
allowed values are already resolved into the FieldOption tagged union.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class FieldType(StrEnum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    MULTISELECT = "multiselect"


class PlainOption(BaseModel):
    """An allowed value that was delivered as a bare string."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    value: str

    @property
    def label(self) -> str:
        return self.value


class ChoiceOption(BaseModel):
    """An allowed value delivered as a Jira option object ({id?, name?, value?})."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["option"] = "option"
    id: str | None = None
    name: str | None = None
    value: str | None = None

    @property
    def label(self) -> str:
        # name, then value, then id
        return self.name or self.value or self.id or ""


FieldOption = Annotated[PlainOption | ChoiceOption, Field(discriminator="kind")]


class FieldDescriptor(BaseModel):
    """One target-system field. Constructed fresh per discovery call, never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    allowed_values: tuple[FieldOption, ...] | None = None
    description: str | None = None

    def option_labels(self) -> list[str]:
        """Display labels of the allowed values, in declared order."""
        if not self.allowed_values:
            return []
        return [opt.label for opt in self.allowed_values if opt.label]

    def has_option(self, label: str) -> bool:
        """Exact (case-sensitive) membership test against the allowed labels."""
        return label in self.option_labels()
