"""
Unit tests for reference-sheet comparison (checkup_derive.compare).
"""

from __future__ import annotations

import pandas as pd
import pytest

from checkup_derive.compare import (
    Mismatch,
    compare_frame,
    compare_outputs,
    read_reference,
)
from checkup_derive.exceptions import ComparisonError
from checkup_derive.outcome import FloatValue, IntValue

_OUTPUTS = {
    "Age": IntValue(53),
    "BMI": FloatValue(22.5),
    "SBP": FloatValue(128.0),
}


def _make_sheet() -> pd.DataFrame:
    return pd.DataFrame({
        "模型用欄位名稱": ["Age", "BMI", "SBP", "LDL", ""],
        "中文名稱": ["年齡", "身體質量指數", "收縮壓", "LDL", ""],
        "2295117": ["53", "22.4", "128", "101", ""],
    })


class TestCompareFrame:
    """Tests for compare_frame()."""

    def test_classifies_rows(self):
        report = compare_frame(_make_sheet(), "2295117", _OUTPUTS)
        assert report.matches == ["Age", "SBP"]
        assert report.mismatches == [Mismatch("BMI", "22.4", "22.5")]
        assert report.missing == ["LDL"]
        assert not report.ok

    def test_all_match(self):
        sheet = _make_sheet().iloc[[0, 2]]
        report = compare_frame(sheet, "2295117", _OUTPUTS)
        assert report.ok
        assert report.summary() == "2295117: 2 match, 0 mismatch, 0 missing"

    def test_unknown_record_column(self):
        with pytest.raises(ComparisonError, match="1752487"):
            compare_frame(_make_sheet(), "1752487", _OUTPUTS)

    def test_to_frame(self):
        df = compare_frame(_make_sheet(), "2295117", _OUTPUTS).to_frame()
        assert list(df.columns) == ["key", "status", "expected", "actual"]
        assert df["status"].value_counts().to_dict() == {"match": 2, "mismatch": 1, "missing": 1}


class TestReadReference:
    """Tests for read_reference() / compare_outputs()."""

    def test_csv_keeps_text(self, tmp_path):
        path = tmp_path / "ref.csv"
        _make_sheet().to_csv(path, index=False, encoding="utf-8-sig")
        df = read_reference(path)
        assert list(df.columns)[0] == "模型用欄位名稱"
        assert df["2295117"].tolist() == ["53", "22.4", "128", "101", ""]

    def test_parquet(self, tmp_path):
        path = tmp_path / "ref.parquet"
        _make_sheet().to_parquet(path, index=False, engine="pyarrow")
        report = compare_outputs(path, "2295117", _OUTPUTS)
        assert report.matches == ["Age", "SBP"]

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "ref.xlsx"
        path.write_bytes(b"")
        with pytest.raises(ComparisonError, match="Unsupported"):
            read_reference(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ComparisonError, match="not found"):
            read_reference(tmp_path / "absent.csv")
