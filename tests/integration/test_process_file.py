"""
Integration tests: source file -> ParseOutcome through the public API.

Covers both source formats with the built-in table, every ingestion
error code, and the JSON envelope that callers consume.
"""

from __future__ import annotations

import json

import pytest

import checkup_derive
from checkup_derive import ErrorCode, Failure, Success
from tests.conftest import EXPECTED_SAMPLE, make_record, write_envelope, write_flat_json


@pytest.mark.integration
class TestProcessFile:
    """Tests for process_file()."""

    def test_txt_record(self, tmp_path, record):
        outcome = checkup_derive.process_file(write_flat_json(tmp_path / "2295117.txt", record))
        assert isinstance(outcome, Success)
        assert outcome.values()["PSQI"] == EXPECTED_SAMPLE["PSQI"]

    def test_xml_and_txt_agree(self, tmp_path, record):
        from_txt = checkup_derive.process_file(write_flat_json(tmp_path / "r.txt", record))
        from_xml = checkup_derive.process_file(write_envelope(tmp_path / "r.xml", record))
        assert from_txt == from_xml

    def test_envelope_json_is_serialisable(self, tmp_path, record):
        outcome = checkup_derive.process_file(write_envelope(tmp_path / "r.xml", record))
        envelope = json.loads(json.dumps(outcome.to_dict(), ensure_ascii=False))
        assert envelope["error_code"] == ""
        assert envelope["data"]["Sex"] == 1
        assert len(envelope["data"]) == 143

    def test_derivation_failure_reaches_caller(self, tmp_path, table):
        record = make_record(table, {"血液及實驗室常規檢查-HbA1c": "0"})
        outcome = checkup_derive.process_file(write_flat_json(tmp_path / "r.txt", record))
        assert outcome.to_dict()["error_code"] == "E012"
        assert outcome.label == "HbA1c"

    def test_custom_table(self, tmp_path):
        table_path = tmp_path / "mini.yaml"
        table_path.write_text(
            "name: mini\n"
            "specs:\n"
            '  - {rule: sex, label: "性別", output_key: Sex, inputs: ["基本資料-性別"]}\n',
            encoding="utf-8",
        )
        table = checkup_derive.load_table(table_path)
        path = write_flat_json(tmp_path / "r.txt", {"基本資料-性別": "女"})
        assert checkup_derive.process_file(path, table).values() == {"Sex": 0}


@pytest.mark.integration
class TestIngestionFailures:
    """Each ingestion problem maps to its own error code, with no label."""

    def test_no_record(self, tmp_path):
        outcome = checkup_derive.process_file(write_envelope(tmp_path / "r.xml", None, "no"))
        assert outcome.code is ErrorCode.NO_RECORD
        assert outcome.label == ""
        assert outcome.to_dict()["data"] == {}

    def test_missing_file(self, tmp_path):
        outcome = checkup_derive.process_file(tmp_path / "absent.xml")
        assert outcome.code is ErrorCode.FILE_READ

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "r.json"
        path.write_text("{}", encoding="utf-8")
        outcome = checkup_derive.process_file(path)
        assert outcome == Failure(
            ErrorCode.FILE_READ, "", "Unsupported file format '.json'. Supported: ['.txt', '.xml']"
        )

    def test_bad_envelope(self, tmp_path):
        path = tmp_path / "r.xml"
        path.write_text("not xml", encoding="utf-8")
        assert checkup_derive.process_file(path).code is ErrorCode.ENVELOPE_PARSE

    def test_bad_payload(self, tmp_path):
        path = tmp_path / "r.txt"
        path.write_text("{", encoding="utf-8")
        assert checkup_derive.process_file(path).code is ErrorCode.PAYLOAD_PARSE

    def test_incomplete_record(self, tmp_path):
        path = write_flat_json(tmp_path / "r.txt", {"基本資料-出生日期": "1970/05/20"})
        outcome = checkup_derive.process_file(path)
        assert outcome == Failure(ErrorCode.MISSING_FIELD, "年齡", "基本資料-健檢日期")
