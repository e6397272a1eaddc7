"""Suggestion ranker: scores a field's allowed values against the description.

Independent of the extraction pipeline; used to help manual entry and to
build the "Consider: ..." hint on candidates awaiting confirmation.
"""

from __future__ import annotations

from pydantic import BaseModel

from jira_field_engine.models.fields import FieldDescriptor

EXACT_MATCH_SCORE = 10
WORD_MATCH_SCORE = 3
DEFAULT_LIMIT = 5
HINT_LIMIT = 3


class RankedValue(BaseModel):
    value: str
    score: int


class SuggestionRanker:
    def rank(self, field: FieldDescriptor, text: str) -> list[RankedValue]:
        """Score every allowed value; zero scores are dropped.

        Sorted by descending score. Python's sort is stable, so ties keep the
        allowed-value order.
        """
        lowered = text.lower()
        is_priority = "priority" in field.name.lower()

        ranked: list[RankedValue] = []
        for label in field.option_labels():
            value = label.lower()
            score = 0

            if value in lowered:
                score += EXACT_MATCH_SCORE

            for word in value.split():
                if len(word) > 2 and word in lowered:
                    score += WORD_MATCH_SCORE

            if is_priority:
                if "urgent" in lowered and "high" in value:
                    score += 5
                if "important" in lowered and "high" in value:
                    score += 3
                if "later" in lowered and "low" in value:
                    score += 3

            if score > 0:
                ranked.append(RankedValue(value=label, score=score))

        ranked.sort(key=lambda r: r.score, reverse=True)
        return ranked

    def suggest(self, field: FieldDescriptor, text: str, limit: int = DEFAULT_LIMIT) -> list[str]:
        return [r.value for r in self.rank(field, text)[:limit]]

    def hint(self, field: FieldDescriptor, text: str) -> str | None:
        top = self.suggest(field, text, limit=HINT_LIMIT)
        return f"Consider: {', '.join(top)}" if top else None
