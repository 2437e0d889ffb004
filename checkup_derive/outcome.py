"""
Outcome types for checkup-derive.

A derivation run over one raw record produces exactly one ``ParseOutcome``:

- ``Success`` -- a fully populated mapping ``output_key -> DerivedValue``,
  one entry per field spec in the table.
- ``Failure`` -- a single structured error (code, label, detail). There is
  no partial outcome: the first failing field discards all work.

Derived values form a small closed sum type, ``IntValue | FloatValue``.
Both carry a canonical text rendering (``format_value``) that downstream
string comparisons rely on: integers print without a decimal point, floats
print at shortest round-trip precision with a trailing ``.0`` dropped.

Error codes are stable and caller-visible; their string values match the
codes emitted by the upstream checkup service integration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable failure codes."""

    FILE_READ = "E003"
    ENVELOPE_PARSE = "E005"
    PAYLOAD_PARSE = "E006"
    NO_RECORD = "E007"
    INVALID_SPEC = "E010"
    MISSING_FIELD = "E011"
    DERIVATION_FAILED = "E012"
    UNKNOWN = "E999"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[ErrorCode, str] = {
    ErrorCode.FILE_READ: "Source file could not be read",
    ErrorCode.ENVELOPE_PARSE: "XML envelope could not be parsed",
    ErrorCode.PAYLOAD_PARSE: "GetDataResult payload is not valid JSON",
    ErrorCode.NO_RECORD: "No checkup record on file for this patient",
    ErrorCode.INVALID_SPEC: "Field specification is invalid",
    ErrorCode.MISSING_FIELD: "Raw field does not exist",
    ErrorCode.DERIVATION_FAILED: "Field could not be derived",
    ErrorCode.UNKNOWN: "Unknown error",
}


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IntValue:
    """Integer code or score (e.g. Sex, smoke_gp, PSQI)."""

    value: int

    def format(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FloatValue:
    """Floating-point measurement (e.g. BMI, SBP, lab values)."""

    value: float

    def format(self) -> str:
        text = repr(self.value)
        if text.endswith(".0"):
            text = text[:-2]
        return text


DerivedValue = IntValue | FloatValue


def format_value(value: DerivedValue) -> str:
    """Render a derived value the way reference sheets store it.

    >>> format_value(IntValue(1))
    '1'
    >>> format_value(FloatValue(130.0))
    '130'
    >>> format_value(FloatValue(22.5))
    '22.5'
    """
    return value.format()


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Success:
    """All field specs derived successfully.

    Attributes:
        outputs: ``output_key -> DerivedValue`` in table order.
    """

    outputs: dict[str, DerivedValue] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return True

    def values(self) -> dict[str, int | float]:
        """Plain ``output_key -> int | float`` view of the outputs."""
        return {key: value.value for key, value in self.outputs.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "",
            "error_code": "",
            "error_detail": "",
            "data": self.values(),
        }


@dataclass(frozen=True)
class Failure:
    """A single structured error.

    Attributes:
        code: The failure class.
        label: Human label of the derived variable being computed when the
            failure occurred. Empty for failures that happen before any
            field is evaluated (file read, envelope parse, ...).
        detail: One-line reason, including the offending raw value(s).
    """

    code: ErrorCode
    label: str = ""
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        if self.label:
            return f"{self.code.description}: {self.label}"
        return self.code.description

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "error_code": self.code.value,
            "error_detail": self.detail,
            "data": {},
        }


ParseOutcome = Success | Failure
