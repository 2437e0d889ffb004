"""
Rule registry for checkup-derive.

Maps the rule names used in field specification tables (``rule: bmi``) to
the shared rule instances. The map is built lazily so that importing the
spec loader does not pull in every rule module up front.
"""

from __future__ import annotations

from checkup_derive.exceptions import SpecValidationError
from checkup_derive.rules.base import BaseRule

_RULE_MAP: dict[str, BaseRule] = {}


def _get_rule_map() -> dict[str, BaseRule]:
    if not _RULE_MAP:
        from checkup_derive.rules.demographics import AgeRule, SexRule
        from checkup_derive.rules.history import DiseaseHistoryRule, FamilyHistoryRule
        from checkup_derive.rules.imaging import AgatstonRule
        from checkup_derive.rules.labs import GlucoseUrineRule, HsCRPRule, ZeroDiscardRule
        from checkup_derive.rules.lifestyle import (
            DOES_NOT_CHEW,
            DOES_NOT_DRINK,
            AbstainMarkerRule,
            AlcoholRule,
            CigaretteRule,
            DietRule,
            ExerciseRule,
        )
        from checkup_derive.rules.questionnaires import BSRS5Rule, PSQIRule
        from checkup_derive.rules.vitals import (
            BloodPressureRule,
            BMIRule,
            GirthRule,
            PassThroughRule,
        )

        rules: list[BaseRule] = [
            AgeRule(),
            SexRule(),
            DiseaseHistoryRule(),
            FamilyHistoryRule(),
            BMIRule(),
            GirthRule(),
            BloodPressureRule(),
            PassThroughRule(),
            AlcoholRule(),
            CigaretteRule(),
            AbstainMarkerRule("betel", DOES_NOT_CHEW),
            AbstainMarkerRule("drink", DOES_NOT_DRINK),
            DietRule(),
            ExerciseRule(),
            PSQIRule(),
            BSRS5Rule(),
            ZeroDiscardRule(),
            GlucoseUrineRule(),
            HsCRPRule(),
            AgatstonRule(),
        ]
        _RULE_MAP.update({rule.name: rule for rule in rules})
    return _RULE_MAP


def rule_names() -> list[str]:
    """Sorted list of registered rule names."""
    return sorted(_get_rule_map())


def get_rule(name: str) -> BaseRule:
    """Look up a rule by registry name.

    Raises:
        SpecValidationError: If no rule is registered under *name*.
    """
    rule_map = _get_rule_map()
    if name not in rule_map:
        raise SpecValidationError(
            f"Unknown rule '{name}'. Registered rules: {sorted(rule_map)}"
        )
    return rule_map[name]
