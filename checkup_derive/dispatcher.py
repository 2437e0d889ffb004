"""
Fail-fast field derivation dispatcher for checkup-derive.

Walks a field specification table in order against one raw record and
produces a single ``ParseOutcome``. For each spec:

  1. Reject a spec that lists no inputs (``INVALID_SPEC``).
  2. Resolve every input name in the record; the first absent key stops
     the run (``MISSING_FIELD``). A key present with ``""`` is a valid
     "not answered" response.
  3. Resolve the rule and check its arity (``INVALID_SPEC``). An output
     key already produced by an earlier spec is rejected the same way.
  4. Call the rule. A ``DerivationError`` stops the run
     (``DERIVATION_FAILED``).

The first failure wins and all partial outputs are discarded. On success
the outputs map holds exactly one value per spec, keyed by output key.

The record is wrapped read-only before any rule sees it; rules receive
only the input values their field spec lists, in order.

``derive_guarded()`` is the top-level entry point for callers that must
never see an exception: any unexpected fault is reported as ``UNKNOWN``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from checkup_derive.exceptions import (
    DerivationError,
    MissingFieldError,
    SpecValidationError,
)
from checkup_derive.outcome import (
    DerivedValue,
    ErrorCode,
    Failure,
    ParseOutcome,
    Success,
)
from checkup_derive.rule_registry import get_rule
from checkup_derive.spec_registry import FieldSpec, FieldSpecTable

logger = logging.getLogger(__name__)


def _specs_of(table: FieldSpecTable | Iterable[FieldSpec]) -> Iterable[FieldSpec]:
    if isinstance(table, FieldSpecTable):
        return table.specs
    return table


def _collect_inputs(spec: FieldSpec, record: Mapping[str, str]) -> list[str]:
    """Raw values for *spec*, in input order.

    Raises:
        MissingFieldError: For the first input name absent from *record*.
    """
    values: list[str] = []
    for name in spec.inputs:
        if name not in record:
            raise MissingFieldError(name)
        values.append(record[name])
    return values


def _derive_one(spec: FieldSpec, record: Mapping[str, str]) -> DerivedValue | Failure:
    """Evaluate one spec, returning its value or the failure it produced."""
    if not spec.inputs:
        return Failure(
            ErrorCode.INVALID_SPEC,
            spec.label,
            f"Field spec '{spec.output_key}' must list at least one input field",
        )

    try:
        values = _collect_inputs(spec, record)
    except MissingFieldError as exc:
        return Failure(exc.code, spec.label, exc.field_name)

    try:
        rule = get_rule(spec.rule)
    except SpecValidationError as exc:
        return Failure(ErrorCode.INVALID_SPEC, spec.label, str(exc))
    if not rule.accepts(len(values)):
        return Failure(
            ErrorCode.INVALID_SPEC,
            spec.label,
            f"Rule '{rule.name}' expects {rule.arity} input(s), "
            f"field spec '{spec.output_key}' lists {len(values)}",
        )

    try:
        return rule.derive(spec.label, values)
    except DerivationError as exc:
        return Failure(ErrorCode.DERIVATION_FAILED, spec.label, str(exc))


def derive(
    record: Mapping[str, str],
    table: FieldSpecTable | Iterable[FieldSpec],
) -> ParseOutcome:
    """Derive every output variable of *table* from *record*.

    Args:
        record: Raw field name -> raw text value. Not modified.
        table: A loaded ``FieldSpecTable`` or any ordered iterable of
            ``FieldSpec``.

    Returns:
        ``Success`` with one value per spec, or the ``Failure`` of the
        first spec (in table order) that could not be derived.
    """
    frozen = MappingProxyType(dict(record))
    outputs: dict[str, DerivedValue] = {}

    for spec in _specs_of(table):
        if spec.output_key in outputs:
            result: DerivedValue | Failure = Failure(
                ErrorCode.INVALID_SPEC,
                spec.label,
                f"Output key '{spec.output_key}' is already produced by an earlier field spec",
            )
        else:
            result = _derive_one(spec, frozen)
        if isinstance(result, Failure):
            logger.warning(
                "Derivation stopped at '%s' (%s): %s",
                spec.output_key, result.code.value, result.detail,
            )
            return result
        outputs[spec.output_key] = result

    logger.info("Derived %d output variables", len(outputs))
    return Success(outputs)


def derive_guarded(
    record: Mapping[str, str],
    table: FieldSpecTable | Iterable[FieldSpec],
) -> ParseOutcome:
    """Like ``derive()``, but an unexpected fault becomes ``Failure(UNKNOWN)``."""
    try:
        return derive(record, table)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected fault during derivation")
        return Failure(ErrorCode.UNKNOWN, "", f"{type(exc).__name__}: {exc}")
