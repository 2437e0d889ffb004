"""
Reference-sheet comparison for checkup-derive.

Checks a record's derived outputs against a hand-maintained reference
sheet. The sheet has one row per output key and one column per patient:

    模型用欄位名稱, 2295117, 1752487, ...
    Age,            52,      61,      ...
    BMI,            22.5,    27.1,    ...

For the chosen patient column every row is classified as:
- match: the derived value, rendered with ``format_value``, equals the
  sheet text;
- mismatch: the key was derived but renders differently;
- missing: the key is not among the derived outputs.

Rendering both sides as text keeps the comparison identical to how the
sheet was produced (integers without a decimal point, shortest float).

Reference sheets may be CSV (``utf-8-sig``, as exported from Excel) or
Parquet. All cells are read as strings so patient ids and codes keep
their leading zeros.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd
import pyarrow.parquet as pq

from checkup_derive.config import DEFAULT_KEY_COLUMN
from checkup_derive.exceptions import ComparisonError
from checkup_derive.outcome import DerivedValue, format_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mismatch:
    key: str
    expected: str
    actual: str


@dataclass
class ComparisonReport:
    """Result of comparing one record against a reference sheet column."""

    record_column: str
    matches: list[str] = field(default_factory=list)
    mismatches: list[Mismatch] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.mismatches and not self.missing

    def summary(self) -> str:
        return (
            f"{self.record_column}: {len(self.matches)} match, "
            f"{len(self.mismatches)} mismatch, {len(self.missing)} missing"
        )

    def to_frame(self) -> pd.DataFrame:
        """One row per compared key with its status."""
        rows = [(key, "match", "", "") for key in self.matches]
        rows += [(m.key, "mismatch", m.expected, m.actual) for m in self.mismatches]
        rows += [(key, "missing", "", "") for key in self.missing]
        return pd.DataFrame(rows, columns=["key", "status", "expected", "actual"])


def read_reference(path: str | Path) -> pd.DataFrame:
    """Read a reference sheet with every cell as a string.

    Raises:
        ComparisonError: If the file is missing or has an unsupported type.
    """
    path = Path(path)
    if not path.exists():
        raise ComparisonError(f"Reference sheet not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    if suffix == ".parquet":
        df = pq.read_table(path).to_pandas()
        return df.fillna("").astype(str)
    raise ComparisonError(
        f"Unsupported reference sheet format '{path.suffix}'. "
        "Supported formats: ['.csv', '.parquet']"
    )


def compare_frame(
    reference: pd.DataFrame,
    record_column: str,
    outputs: Mapping[str, DerivedValue],
    key_column: str = DEFAULT_KEY_COLUMN,
) -> ComparisonReport:
    """Compare *outputs* against *record_column* of an in-memory sheet.

    Rows with a blank key are skipped.

    Raises:
        ComparisonError: If either column is absent from the sheet.
    """
    missing_cols = [c for c in (key_column, record_column) if c not in reference.columns]
    if missing_cols:
        raise ComparisonError(
            f"Reference sheet lacks column(s) {missing_cols}. "
            f"Available: {list(reference.columns)}"
        )

    report = ComparisonReport(record_column=record_column)
    for key, expected in zip(reference[key_column], reference[record_column]):
        key = key.strip()
        if not key:
            continue
        if key not in outputs:
            logger.warning("Key not found in derived outputs: %s", key)
            report.missing.append(key)
            continue
        actual = format_value(outputs[key])
        expected = expected.strip()
        if actual == expected:
            report.matches.append(key)
        else:
            logger.warning("Mismatch: %s expected=%s actual=%s", key, expected, actual)
            report.mismatches.append(Mismatch(key, expected, actual))

    logger.info("Comparison %s", report.summary())
    return report


def compare_outputs(
    reference_path: str | Path,
    record_column: str,
    outputs: Mapping[str, DerivedValue],
    key_column: str = DEFAULT_KEY_COLUMN,
) -> ComparisonReport:
    """Read a reference sheet and compare *outputs* against one of its columns."""
    reference = read_reference(reference_path)
    return compare_frame(reference, record_column, outputs, key_column=key_column)
