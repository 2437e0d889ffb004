"""
Physical examination rules: BMI, abdominal girth, blood pressure and the
body-composition pass-through values.

Plausibility windows:
- BMI: 10 < BMI <= 60 (reported or computed).
- Abdominal girth: 30 < girth <= 200 cm.
- Blood pressure: a reading counts only when > 0.
"""

from __future__ import annotations

from collections.abc import Sequence

from checkup_derive.exceptions import DerivationError
from checkup_derive.outcome import FloatValue
from checkup_derive.rules.base import BaseRule, parse_float

BMI_RANGE = (10.0, 60.0)
GIRTH_RANGE = (30.0, 200.0)


def _in_range(value: float, bounds: tuple[float, float]) -> bool:
    low, high = bounds
    return low < value <= high


class BMIRule(BaseRule):
    """Body mass index from (height cm, weight kg, reported BMI).

    The reported BMI wins when it parses and is plausible. Otherwise BMI is
    recomputed as ``weight / (height / 100) ** 2`` and must itself be
    plausible.
    """

    name = "bmi"
    arity = 3

    def derive(self, label: str, values: Sequence[str]) -> FloatValue:
        height_text = values[0].strip()
        weight_text = values[1].strip()
        reported_text = values[2].strip()

        reported = parse_float(reported_text)
        if reported is not None and _in_range(reported, BMI_RANGE):
            return FloatValue(reported)

        height = parse_float(height_text)
        if height is None:
            raise DerivationError(f"[{label}] invalid height: {height_text!r}")
        weight = parse_float(weight_text)
        if weight is None:
            raise DerivationError(f"[{label}] invalid weight: {weight_text!r}")

        if height > 0 and weight > 0:
            meters = height / 100
            computed = weight / meters / meters
            if _in_range(computed, BMI_RANGE):
                return FloatValue(computed)

        raise DerivationError(
            f"[{label}] no plausible value (height={height_text!r}, "
            f"weight={weight_text!r}, reported={reported_text!r})"
        )


class GirthRule(BaseRule):
    name = "girth"
    arity = 1

    def derive(self, label: str, values: Sequence[str]) -> FloatValue:
        text = values[0].strip()
        girth = parse_float(text)
        if girth is None:
            raise DerivationError(f"[{label}] invalid value: {text!r}")
        if not _in_range(girth, GIRTH_RANGE):
            raise DerivationError(f"[{label}] implausible value rejected: {girth}")
        return FloatValue(girth)


class BloodPressureRule(BaseRule):
    """Average of right and left arm readings.

    Blank or unparsable readings count as 0. When only one side is > 0 it
    is used as-is; when neither is, the record is rejected.
    """

    name = "blood_pressure"
    arity = 2

    def derive(self, label: str, values: Sequence[str]) -> FloatValue:
        right = parse_float(values[0]) or 0.0
        left = parse_float(values[1]) or 0.0

        if right > 0 and left > 0:
            return FloatValue((right + left) / 2)
        if right > 0:
            return FloatValue(right)
        if left > 0:
            return FloatValue(left)

        raise DerivationError(
            f"[{label}] no valid reading (right={values[0]!r}, left={values[1]!r})"
        )


class PassThroughRule(BaseRule):
    """Numeric value taken as-is (body-composition analyser outputs)."""

    name = "passthrough"
    arity = 1

    def derive(self, label: str, values: Sequence[str]) -> FloatValue:
        text = values[0].strip()
        value = parse_float(text)
        if value is None:
            raise DerivationError(f"[{label}] invalid value: {text!r}")
        return FloatValue(value)
