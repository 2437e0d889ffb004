"""
Laboratory value rules: zero-discard numerics, urine glucose and hsCRP.

The laboratory system exports ``0`` for "not measured", so a zero reading
is rejected rather than passed through as a real value.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from checkup_derive.exceptions import DerivationError
from checkup_derive.outcome import FloatValue, IntValue
from checkup_derive.rules.base import BaseRule, is_blank, parse_float

logger = logging.getLogger(__name__)

# Below-detection-limit tokens, plain and HTML-escaped, mapped to half the limit.
HSCRP_LIMIT_TOKENS = {
    "<0.01": 0.005,
    "&lt;0.01": 0.005,
    "<0.02": 0.01,
    "&lt;0.02": 0.01,
}


class ZeroDiscardRule(BaseRule):
    name = "zero_discard"
    arity = 1

    def derive(self, label: str, values: Sequence[str]) -> FloatValue:
        text = values[0].strip()
        value = parse_float(text)
        if value is None:
            raise DerivationError(f"[{label}] value is not a number: {text!r}")
        if value == 0:
            raise DerivationError(f"[{label}] value is 0 (not measured), discarded: {text!r}")
        return FloatValue(value)


class GlucoseUrineRule(BaseRule):
    """Urine dipstick glucose grade.

    ``2+``/``3+``/``4+`` -> 3, ``1+`` -> 2, ``+/-``/``+-`` (trace) -> 1,
    normal / ``0`` / ``-`` -> 0. Checked in that order, so ``"1+ glucose"``
    grades as 2.
    """

    name = "glucose_urine"
    arity = 1

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        text = values[0].strip()

        if any(token in text for token in ("2+", "3+", "4+")):
            return IntValue(3)
        if "1+" in text:
            return IntValue(2)
        if "+/-" in text or "+-" in text:
            return IntValue(1)
        if "normal" in text.lower() or text in ("0", "-"):
            return IntValue(0)

        raise DerivationError(f"[{label}] unrecognised urine glucose result: {text!r}")


def _hscrp_value(text: str) -> float | None:
    """Interpret one hsCRP field.

    Returns ``None`` when the field is unusable (blank or ``0``) and raises
    ``DerivationError`` when it is non-blank but not a number.
    """
    if is_blank(text) or text == "0":
        return None
    if text in HSCRP_LIMIT_TOKENS:
        return HSCRP_LIMIT_TOKENS[text]
    value = parse_float(text)
    if value is None:
        raise DerivationError(f"value is not a number: {text!r}")
    return value


class HsCRPRule(BaseRule):
    """High-sensitivity CRP from the current field, falling back to the
    field retired on 2016-06-18 for older records.
    """

    name = "hscrp"
    arity = 2

    def derive(self, label: str, values: Sequence[str]) -> FloatValue:
        for position, text in enumerate(values, start=1):
            try:
                value = _hscrp_value(text.strip())
            except DerivationError as exc:
                raise DerivationError(f"[{label}] input {position}: {exc}") from exc
            if value is not None:
                if position > 1:
                    logger.debug("%s: using deprecated field value %s", label, value)
                return FloatValue(value)

        raise DerivationError(
            f"[{label}] both current and deprecated fields are blank or 0: "
            f"{values[0]!r}, {values[1]!r}"
        )
