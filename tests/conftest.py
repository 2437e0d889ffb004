"""
Shared test fixtures and helpers for checkup-derive tests.

Raw records are synthesised from the built-in field specification table:
every raw field the table reads gets a plausible answer chosen by the rule
that reads it (``SAMPLE_VALUES``). Tests override single fields to
exercise a specific behaviour. ``EXPECTED_SAMPLE`` lists the derived values
of the unmodified sample record for a representative set of output keys.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from checkup_derive.spec_registry import FieldSpecTable, load_table

# ---------------------------------------------------------------------------
# Sample answers per rule -- edit here if the questionnaire wording changes
# ---------------------------------------------------------------------------
SAMPLE_VALUES: dict[str, list[str]] = {
    "age": ["1970/05/20", "2023/08/15"],
    "sex": ["男"],
    "disease_history": ["無"],
    "family_history": ["無"],
    "bmi": ["170", "65", "22.5"],
    "girth": ["85"],
    "blood_pressure": ["130", "126"],
    "passthrough": ["12.5"],
    "alcohol": ["無飲酒", "", "", "", "", "", "", ""],
    "cigarette": ["不抽", "不抽", "不抽", "不抽"],
    "betel": ["不嚼"],
    "drink": ["不喝"],
    "diet": ["葷食"],
    "exercise": ["3天", "30分鐘", "2天", "1小時"],
    "psqi": ["6-7小時", "15-30分鐘", "85%以上", "每週少於一次", "好", "從未如此", "從未如此"],
    "bsrs5": ["沒有", "沒有", "沒有", "沒有", "沒有"],
    "zero_discard": ["4.5"],
    "glucose_urine": ["-"],
    "hscrp": ["0.12", ""],
    "agatston": ["", "", "", "", "", ""],
}

EXPECTED_SAMPLE: dict[str, int | float] = {
    "Age": 53,
    "Sex": 1,
    "HT": 0,
    "cancer": 0,
    "fami_cancer": 0,
    "BMI": 22.5,
    "Abd_Girth": 85.0,
    "SBP": 128.0,
    "DBP": 128.0,
    "MBF": 12.5,
    "alcohol_gp": 0,
    "smoke_gp": 0,
    "betel_gp": 0,
    "coffee_gp": 0,
    "tea_gp": 0,
    "food_gp": 1,
    "excercise_week": 300,
    "PSQI": 4,
    "BSRS5": 0,
    "Albumin": 4.5,
    "Glucose_U": 0,
    "hsCRP": 0.12,
    "Agatston_score": 0.0,
}


def make_record(table: FieldSpecTable, overrides: dict[str, str] | None = None) -> dict[str, str]:
    """Build a complete raw record for *table*, then apply *overrides*."""
    record: dict[str, str] = {}
    for spec in table.specs:
        samples = SAMPLE_VALUES[spec.rule]
        for i, name in enumerate(spec.inputs):
            record[name] = samples[i] if i < len(samples) else samples[-1]
    if overrides:
        record.update(overrides)
    return record


def write_flat_json(path: Path, record: dict[str, str]) -> Path:
    path.write_text(json.dumps(record, ensure_ascii=False), encoding="utf-8")
    return path


def write_envelope(path: Path, record: dict[str, str] | None, have_data: str = "yes") -> Path:
    """Write a SOAP response envelope carrying *record* as the JSON payload."""
    payload = json.dumps({"HaveData": have_data, "Data": record or {}}, ensure_ascii=False)
    escaped = payload.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    path.write_text(
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
        "<soap:Body>"
        '<GetDataResponse xmlns="http://tempuri.org/">'
        f"<GetDataResult>{escaped}</GetDataResult>"
        "</GetDataResponse>"
        "</soap:Body>"
        "</soap:Envelope>",
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def table() -> FieldSpecTable:
    """The built-in field specification table."""
    return load_table()


@pytest.fixture
def record(table: FieldSpecTable) -> dict[str, str]:
    """A complete sample record that derives successfully."""
    return make_record(table)


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: end-to-end tests that read source files from disk",
    )
