"""
checkup-derive: derive model variables from raw health checkup records.

A raw record is a flat mapping of questionnaire / examination / lab field
names to their text values. A field specification table (YAML) binds
each derived variable to a named rule and the raw fields it reads. The
dispatcher evaluates the table in order and returns one outcome: either
every variable, or the first structured failure.

Public API surface:

- ``process_file(path, table=None)`` -- **recommended entry point**.
  Reads an ``.xml`` response envelope or a ``.txt`` flat JSON record and
  derives every variable. Never raises for bad input; returns a
  ``Failure`` instead.

- ``derive(record, table)`` -- derive from an in-memory record.
  ``derive_guarded`` additionally turns unexpected faults into
  ``Failure(UNKNOWN)``.

- ``run_config(path)`` -- run a derive.yaml workflow (source file, table,
  optional reference-sheet comparison).

- ``load_table(path=None)`` -- load a field specification table; the
  built-in ``health_checkup_v3`` table when *path* is ``None``.

Example::

    import checkup_derive

    outcome = checkup_derive.process_file("client_rawdata/2295117.txt")
    if outcome.ok:
        print(outcome.values()["BMI"])
    else:
        print(outcome.code.value, outcome.message, outcome.detail)
"""

from __future__ import annotations

from checkup_derive._pipeline import RunResult, process_file, run_config
from checkup_derive.dispatcher import derive, derive_guarded
from checkup_derive.outcome import (
    ErrorCode,
    Failure,
    FloatValue,
    IntValue,
    ParseOutcome,
    Success,
    format_value,
)
from checkup_derive.spec_registry import FieldSpec, FieldSpecTable, load_table

__all__ = [
    "derive",
    "derive_guarded",
    "process_file",
    "run_config",
    "load_table",
    "RunResult",
    "FieldSpec",
    "FieldSpecTable",
    "ParseOutcome",
    "Success",
    "Failure",
    "ErrorCode",
    "IntValue",
    "FloatValue",
    "format_value",
]
