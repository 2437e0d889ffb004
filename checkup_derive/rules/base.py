"""
Base rule protocol / ABC for checkup-derive.

Every derivation rule implements this interface. The contract is:
1. ``derive()`` takes the variable's human label and the raw input values,
   ordered exactly as the field spec lists them.
2. It returns one ``DerivedValue`` (``IntValue`` or ``FloatValue``) or
   raises ``DerivationError`` with a one-line reason naming the label and
   the offending raw value.

Arity is declared on the class and checked by the dispatcher before
``derive()`` is called, so rules may index their inputs directly. A rule
with ``arity = None`` accepts any number (>= 1) of inputs.

Rules are stateless; a single instance per rule is shared by every record.
"""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence

from checkup_derive.outcome import DerivedValue

# Plain decimal / scientific notation. Rejects Python-only spellings such as
# "1_000", "inf" and "nan" that float() would otherwise accept.
_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_float(text: str) -> float | None:
    """Parse a trimmed numeric string, returning ``None`` when it is not one."""
    text = text.strip()
    if not _FLOAT_PATTERN.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def is_blank(text: str) -> bool:
    return text.strip() == ""


class BaseRule(ABC):
    """Abstract base class for field derivation rules.

    Attributes:
        name: Registry name referenced by field specs (``rule:`` in YAML).
        arity: Exact number of inputs, or ``None`` for variable arity.
    """

    name: str = ""
    arity: int | None = None

    def accepts(self, count: int) -> bool:
        """Return True if the rule can be called with *count* inputs."""
        if self.arity is None:
            return count >= 1
        return count == self.arity

    @abstractmethod
    def derive(self, label: str, values: Sequence[str]) -> DerivedValue:
        """Derive one output value.

        Args:
            label: Human label of the derived variable (for diagnostics).
            values: Raw input strings, in field spec order.

        Returns:
            The derived value.

        Raises:
            DerivationError: If the inputs cannot be derived.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, arity={self.arity})"
