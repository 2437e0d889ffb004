"""
Configuration models and YAML I/O for checkup-derive.

This module defines the Pydantic models that map 1:1 to derive.yaml,
plus helpers for loading and saving it.

Key models:
- DeriveConfig: Top-level config (source + table + optional compare).
- SourceConfig: Raw record file (.xml envelope or .txt flat JSON).
- TableConfig: Field specification table to use (None -> built-in).
- CompareConfig: Reference sheet to check derived values against.

Key functions:
- load_config(path) -> DeriveConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.

Why Pydantic + YAML:
- Pydantic gives strict validation and clear error messages.
- YAML is human-editable; a run can be re-pointed at another patient
  file or reference sheet without code changes.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from checkup_derive.exceptions import SpecValidationError

logger = logging.getLogger(__name__)

DEFAULT_KEY_COLUMN = "模型用欄位名稱"


class SourceConfig(BaseModel):
    """Source file information."""

    input_path: str = Field(..., description="Path to the raw record (.xml or .txt)")

    @field_validator("input_path")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        if Path(value).suffix.lower() not in (".xml", ".txt"):
            raise ValueError(f"input_path must be a .xml or .txt file, got '{value}'")
        return value


class TableConfig(BaseModel):
    """Field specification table selection."""

    spec_path: str | None = Field(
        None, description="YAML table to load; None uses the built-in table"
    )


class CompareConfig(BaseModel):
    """Reference sheet used to check derived values."""

    reference_path: str = Field(..., description="Reference sheet (.csv or .parquet)")
    record_column: str = Field(
        ..., description="Column holding this record's expected values (patient id)"
    )
    key_column: str = Field(
        DEFAULT_KEY_COLUMN, description="Column holding output keys"
    )


class DeriveConfig(BaseModel):
    """Top-level configuration for checkup-derive. Maps 1:1 to derive.yaml."""

    source: SourceConfig
    table: TableConfig = Field(default_factory=TableConfig)
    compare: CompareConfig | None = None


def load_config(path: str | Path) -> DeriveConfig:
    """Load and validate derive.yaml into a DeriveConfig model.

    Relative paths inside the file are kept as written; they resolve
    against the working directory of the run.

    Raises:
        FileNotFoundError: If the config file does not exist.
        SpecValidationError: If the config file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise SpecValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return DeriveConfig.model_validate(raw)


def save_config(config: DeriveConfig, path: str | Path) -> None:
    """Serialize a DeriveConfig to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# checkup-derive configuration\n")
        f.write("# Point source.input_path at a patient file; compare is optional.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved config to %s", path)
