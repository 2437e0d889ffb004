"""
Medical-history flag rules.

Both rules scan every input for a keyword and return a 0/1 flag. They never
fail: an unanswered or unrecognised history question simply yields 0.

- Disease / medication history: any of ``有`` (yes), ``治療`` (under
  treatment), ``藥物`` (medication), ``手術`` (surgery).
- Family history: any lineage token -- father, mother, paternal or maternal
  grandparents.
"""

from __future__ import annotations

from collections.abc import Sequence

from checkup_derive.outcome import IntValue
from checkup_derive.rules.base import BaseRule

DISEASE_KEYWORDS = ("有", "治療", "藥物", "手術")

# "外組父母" is a misspelling found in older questionnaire exports.
FAMILY_KEYWORDS = ("父親", "母親", "祖父母", "外祖父母", "外組父母")


def _contains_any(values: Sequence[str], keywords: Sequence[str]) -> bool:
    return any(keyword in value for value in values for keyword in keywords)


class DiseaseHistoryRule(BaseRule):
    name = "disease_history"
    arity = None

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        return IntValue(1 if _contains_any(values, DISEASE_KEYWORDS) else 0)


class FamilyHistoryRule(BaseRule):
    name = "family_history"
    arity = None

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        return IntValue(1 if _contains_any(values, FAMILY_KEYWORDS) else 0)
