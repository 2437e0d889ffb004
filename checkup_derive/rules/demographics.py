"""
Demographic rules: age at checkup and sex.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from datetime import date, datetime

from checkup_derive.exceptions import DerivationError
from checkup_derive.outcome import IntValue
from checkup_derive.rules.base import BaseRule

_DATE_FORMAT = "%Y/%m/%d"
_DATE_PATTERN = re.compile(r"\d{4}/\d{2}/\d{2}")
_DAYS_PER_YEAR = 365.25

_SEX_CODES = {"男": 1, "女": 0}


def _parse_date(text: str) -> date | None:
    """Strict ``YYYY/MM/DD`` parse (zero-padded month and day)."""
    if not _DATE_PATTERN.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, _DATE_FORMAT).date()
    except ValueError:
        return None


class AgeRule(BaseRule):
    """Whole years between birth date and checkup date.

    Age is ``floor(days / 365.25)``, which absorbs leap days without
    calendar-aware birthday arithmetic.
    """

    name = "age"
    arity = 2

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        birth_text = values[0].strip()
        checkup_text = values[1].strip()

        birth = _parse_date(birth_text)
        if birth is None:
            raise DerivationError(f"[{label}] birth date cannot be parsed: {birth_text!r}")
        checkup = _parse_date(checkup_text)
        if checkup is None:
            raise DerivationError(f"[{label}] checkup date cannot be parsed: {checkup_text!r}")

        return IntValue(math.floor((checkup - birth).days / _DAYS_PER_YEAR))


class SexRule(BaseRule):
    """``男`` -> 1, ``女`` -> 0; anything else is rejected."""

    name = "sex"
    arity = 1

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        sex = values[0].strip()
        if sex not in _SEX_CODES:
            raise DerivationError(f"[{label}] unrecognised sex: {sex!r}")
        return IntValue(_SEX_CODES[sex])
