"""
Internal pipeline orchestration for checkup-derive.

Chains ingestion -> derivation (-> optional comparison) for one source
file and converts every error into a ``Failure`` at this boundary, so the
public entry points never raise for bad input data.

This module is **not** part of the public API; use the functions
re-exported from ``checkup_derive``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from checkup_derive.compare import ComparisonReport, compare_outputs
from checkup_derive.config import load_config
from checkup_derive.dispatcher import derive
from checkup_derive.exceptions import CheckupDeriveError
from checkup_derive.outcome import ErrorCode, Failure, ParseOutcome, Success
from checkup_derive.sources import read_record
from checkup_derive.spec_registry import FieldSpecTable, default_table, load_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Outcome of a configured run, plus the comparison when one was requested."""

    outcome: ParseOutcome
    report: ComparisonReport | None = None


def process_file(
    path: str | Path,
    table: FieldSpecTable | None = None,
) -> ParseOutcome:
    """Read the raw record in *path* and derive every output variable.

    Steps:
      1. ``read_record()`` -- pick the reader by extension and parse.
      2. ``derive()`` -- fail-fast evaluation of *table* (built-in table
         when ``None``).

    Ingestion errors become a ``Failure`` with their own code (no label);
    any other exception becomes ``Failure(UNKNOWN)``.
    """
    logger.info("process_file() -- path=%s", path)
    try:
        record = read_record(path)
        return derive(record, table if table is not None else default_table())
    except CheckupDeriveError as exc:
        logger.warning("Cannot process %s (%s): %s", path, exc.code.value, exc)
        return Failure(exc.code, "", str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected fault while processing %s", path)
        return Failure(ErrorCode.UNKNOWN, "", f"{type(exc).__name__}: {exc}")


def run_config(config_path: str | Path) -> RunResult:
    """Run the workflow described by a derive.yaml file.

    Orchestration:
      1. ``load_config()`` -> ``DeriveConfig``.
      2. ``load_table()`` when ``table.spec_path`` is set.
      3. ``process_file()`` on ``source.input_path``.
      4. ``compare_outputs()`` when a ``compare`` section is present and
         the derivation succeeded.

    Raises:
        FileNotFoundError: If the config or table file does not exist.
        pydantic.ValidationError: If either fails schema validation.
        SpecValidationError: If the table references unknown rules.
        ComparisonError: If the reference sheet is unusable.
    """
    config = load_config(config_path)
    table = load_table(config.table.spec_path) if config.table.spec_path else None

    outcome = process_file(config.source.input_path, table)
    report = None
    if config.compare is not None and isinstance(outcome, Success):
        report = compare_outputs(
            config.compare.reference_path,
            config.compare.record_column,
            outcome.outputs,
            key_column=config.compare.key_column,
        )
    elif config.compare is not None:
        logger.info("Skipping comparison: derivation failed (%s)", outcome.code.value)
    return RunResult(outcome, report)
