"""
Integration tests: derive.yaml workflow and the run script.

Tests the full cycle: write record + reference sheet -> save_config() ->
run_config() / scripts/run_derive.py main().
"""

from __future__ import annotations

import json

import pandas as pd
import pytest

import checkup_derive
from checkup_derive.config import CompareConfig, DeriveConfig, SourceConfig, save_config
from checkup_derive.outcome import ErrorCode
from tests.conftest import EXPECTED_SAMPLE, make_record, write_envelope, write_flat_json


def _write_reference(path, values: dict[str, str]) -> None:
    pd.DataFrame({
        "模型用欄位名稱": list(values),
        "2295117": list(values.values()),
    }).to_csv(path, index=False, encoding="utf-8-sig")


@pytest.mark.integration
class TestRunConfig:
    """Tests for run_config()."""

    def test_without_compare(self, tmp_path, record):
        source = write_envelope(tmp_path / "2295117.xml", record)
        config_path = tmp_path / "derive.yaml"
        save_config(DeriveConfig(source=SourceConfig(input_path=str(source))), config_path)

        result = checkup_derive.run_config(config_path)
        assert result.outcome.ok
        assert result.report is None

    def test_with_compare(self, tmp_path, record):
        source = write_flat_json(tmp_path / "2295117.txt", record)
        reference = tmp_path / "HMC_with_demo.csv"
        _write_reference(reference, {"Age": "53", "BMI": "22.5", "PSQI": "5", "Extra": "1"})
        config_path = tmp_path / "derive.yaml"
        save_config(
            DeriveConfig(
                source=SourceConfig(input_path=str(source)),
                compare=CompareConfig(reference_path=str(reference), record_column="2295117"),
            ),
            config_path,
        )

        report = checkup_derive.run_config(config_path).report
        assert report.matches == ["Age", "BMI"]
        assert [m.key for m in report.mismatches] == ["PSQI"]
        assert report.missing == ["Extra"]

    def test_compare_skipped_on_failure(self, tmp_path, table):
        source = write_flat_json(tmp_path / "r.txt", make_record(table, {"基本資料-性別": "?"}))
        config_path = tmp_path / "derive.yaml"
        save_config(
            DeriveConfig(
                source=SourceConfig(input_path=str(source)),
                compare=CompareConfig(reference_path=str(tmp_path / "absent.csv"), record_column="x"),
            ),
            config_path,
        )

        result = checkup_derive.run_config(config_path)
        assert result.outcome.code is ErrorCode.DERIVATION_FAILED
        assert result.report is None


@pytest.mark.integration
class TestRunScript:
    """Tests for scripts/run_derive.py main()."""

    def test_prints_envelope(self, tmp_path, record, capsys):
        from scripts.run_derive import main

        source = write_flat_json(tmp_path / "2295117.txt", record)
        assert main([str(source)]) == 0
        envelope = json.loads(capsys.readouterr().out)
        assert envelope["data"]["Age"] == EXPECTED_SAMPLE["Age"]

    def test_failure_exit_status(self, tmp_path, capsys):
        from scripts.run_derive import main

        source = write_envelope(tmp_path / "r.xml", None, have_data="no")
        assert main([str(source)]) == 1
        assert json.loads(capsys.readouterr().out)["error_code"] == "E007"

    def test_compare_mismatch_exit_status(self, tmp_path, record):
        from scripts.run_derive import main

        source = write_flat_json(tmp_path / "2295117.txt", record)
        reference = tmp_path / "ref.csv"
        _write_reference(reference, {"Age": "54"})
        assert main([str(source), "--compare", str(reference), "--id", "2295117"]) == 1

    def test_missing_config_exit_status(self, tmp_path, caplog, capsys):
        from scripts.run_derive import main

        assert main([str(tmp_path / "absent.yaml")]) == 1
        assert capsys.readouterr().out == ""
        assert "Config file not found" in caplog.text

    def test_invalid_config_exit_status(self, tmp_path):
        from scripts.run_derive import main

        config_path = tmp_path / "derive.yaml"
        config_path.write_text("source: {}\n", encoding="utf-8")
        assert main([str(config_path)]) == 1

    def test_missing_reference_sheet_exit_status(self, tmp_path, record, caplog):
        from scripts.run_derive import main

        source = write_flat_json(tmp_path / "2295117.txt", record)
        absent = tmp_path / "absent.csv"
        assert main([str(source), "--compare", str(absent), "--id", "2295117"]) == 1
        assert "Reference sheet not found" in caplog.text
