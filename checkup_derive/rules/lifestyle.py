"""
Lifestyle habit rules from the "Hobit : 生活習慣" questionnaire section.

Group codes:
- alcohol_gp: 0 = no drinking, 1 = social drinking, 2 = regular drinking.
- smoke_gp: 0 = never, 1 = quit, 2 = current smoker.
- betel_gp / coffee_gp / tea_gp: 0 = no habit, 1 = habit.
- food_gp: 0 = vegetarian, 1 = non-vegetarian.
- excercise_week: weekly activity minutes, vigorous minutes counted double.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from checkup_derive.exceptions import DerivationError
from checkup_derive.outcome import IntValue
from checkup_derive.rules.base import BaseRule
from checkup_derive.rules.grammar import parse_day_count, parse_duration_minutes

logger = logging.getLogger(__name__)

SOCIAL_DRINKING = "社交飲酒"
NO_DRINKING = "無飲酒"
DOES_NOT_SMOKE = "不抽"
DOES_NOT_CHEW = "不嚼"
DOES_NOT_DRINK = "不喝"
VEGETARIAN = "素"


def _answered(text: str, marker: str) -> bool:
    """True when the answer is neither blank nor the "does not" marker."""
    return text not in ("", marker)


class AlcoholRule(BaseRule):
    """Drinking group from the frequency answer plus 7 weekly day-count bands.

    Inputs: frequency descriptor, then days per week for each alcohol
    concentration band (<10% ... >60%). Any band reported as non-zero means
    regular drinking regardless of the frequency descriptor.
    """

    name = "alcohol"
    arity = 8

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        frequency = values[0].strip()
        bands = [value.strip() for value in values[1:]]

        if any(band not in ("", "0") for band in bands):
            return IntValue(2)
        if SOCIAL_DRINKING in frequency:
            return IntValue(1)
        if NO_DRINKING in frequency:
            return IntValue(0)

        raise DerivationError(
            f"[{label}] unrecognised drinking frequency {frequency!r} "
            f"with no weekly drinking days"
        )


class CigaretteRule(BaseRule):
    """Smoking group from (current daily amount, years smoked, years since
    quitting, daily amount before quitting).

    Tiers are checked in order: any current-smoking answer -> 2; otherwise
    any quit answer -> 1; otherwise all blank / ``不抽`` -> 0. The tiers
    cover every combination, so this rule never fails.
    """

    name = "cigarette"
    arity = 4

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        current_amount, years_smoked, years_quit, prior_amount = (
            value.strip() for value in values
        )

        if _answered(current_amount, DOES_NOT_SMOKE) or _answered(years_smoked, DOES_NOT_SMOKE):
            return IntValue(2)
        if _answered(years_quit, DOES_NOT_SMOKE) or _answered(prior_amount, DOES_NOT_SMOKE):
            return IntValue(1)
        # every answer is blank or 不抽
        return IntValue(0)


class AbstainMarkerRule(BaseRule):
    """Habit flag: blank or the "does not" marker -> 0, anything else -> 1.

    One instance per habit, each with its own marker: betel nut uses
    ``不嚼`` (does not chew); tea and coffee use ``不喝`` (does not drink).
    """

    arity = 1

    def __init__(self, name: str, marker: str) -> None:
        self.name = name
        self.marker = marker

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        return IntValue(1 if _answered(values[0].strip(), self.marker) else 0)


class DietRule(BaseRule):
    name = "diet"
    arity = 1

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        return IntValue(0 if VEGETARIAN in values[0] else 1)


class ExerciseRule(BaseRule):
    """Weekly exercise volume in minutes.

    Inputs: vigorous days, vigorous duration, moderate days, moderate
    duration. ``total = vigorous_days * vigorous_minutes * 2 +
    moderate_days * moderate_minutes``.
    """

    name = "exercise"
    arity = 4

    _FIELDS = (
        ("vigorous activity days", parse_day_count),
        ("vigorous activity duration", parse_duration_minutes),
        ("moderate activity days", parse_day_count),
        ("moderate activity duration", parse_duration_minutes),
    )

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        parsed: list[int] = []
        for (field_name, parse), text in zip(self._FIELDS, values):
            try:
                parsed.append(parse(text))
            except DerivationError as exc:
                raise DerivationError(f"[{label}] {field_name}: {exc}") from exc

        vigorous_days, vigorous_minutes, moderate_days, moderate_minutes = parsed
        total = vigorous_days * vigorous_minutes * 2 + moderate_days * moderate_minutes
        logger.debug(
            "%s: vigorous %d x %d min, moderate %d x %d min -> %d",
            label, vigorous_days, vigorous_minutes, moderate_days, moderate_minutes, total,
        )
        return IntValue(total)
