"""
Field specification table loader for checkup-derive.

Loads field specification YAML files from checkup_derive/fieldspecs/ and
provides structured access via Pydantic models. Each table defines:
- name: unique identifier (e.g., "health_checkup_v3")
- description: free text
- specs: ordered list of field specs, each with
    - rule: registry name of the derivation rule (see rule_registry.py)
    - label: human label used in diagnostics
    - output_key: derived variable name (unique within the table)
    - inputs: ordered raw field names passed to the rule

Table order is significant: it is both the evaluation order and the order
in which failures are reported.

Why YAML instead of hardcoded:
- Questionnaire column names change between form versions; the table can
  be edited or swapped without touching rule code.
- The table stays inspectable and testable independently of rule logic.
"""

from __future__ import annotations

import logging
from collections import Counter
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, model_validator

from checkup_derive.exceptions import SpecValidationError
from checkup_derive.rule_registry import get_rule

logger = logging.getLogger(__name__)

# Directory containing field specification YAML files (sibling package)
_FIELDSPECS_DIR = Path(__file__).parent / "fieldspecs"

DEFAULT_TABLE = "health_checkup_v3"


class FieldSpec(BaseModel):
    """One derived output variable.

    Input arity is not validated here; the dispatcher checks
    it against the rule at call time and reports a mismatch as
    ``INVALID_SPEC``.
    """

    model_config = ConfigDict(frozen=True)

    rule: str
    label: str
    output_key: str
    inputs: tuple[str, ...] = ()


class FieldSpecTable(BaseModel):
    """A complete, ordered field specification table loaded from YAML."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    specs: tuple[FieldSpec, ...]

    @model_validator(mode="after")
    def _check_unique_output_keys(self) -> FieldSpecTable:
        """Two specs writing the same output key would silently overwrite."""
        counts = Counter(spec.output_key for spec in self.specs)
        duplicates = sorted(key for key, count in counts.items() if count > 1)
        if duplicates:
            raise ValueError(
                f"Table '{self.name}' has duplicate output keys: {duplicates}"
            )
        return self

    @property
    def output_keys(self) -> list[str]:
        return [spec.output_key for spec in self.specs]

    @property
    def raw_fields(self) -> list[str]:
        """All raw field names the table consumes, in first-use order."""
        seen: dict[str, None] = {}
        for spec in self.specs:
            for name in spec.inputs:
                seen.setdefault(name, None)
        return list(seen)

    def __len__(self) -> int:
        return len(self.specs)


def validate_rules(table: FieldSpecTable) -> None:
    """Check that every spec references a registered rule.

    Raises:
        SpecValidationError: Listing every spec with an unknown rule.
    """
    unknown: list[str] = []
    for spec in table.specs:
        try:
            get_rule(spec.rule)
        except SpecValidationError:
            unknown.append(f"{spec.output_key} -> {spec.rule!r}")
    if unknown:
        raise SpecValidationError(
            f"Table '{table.name}' references unknown rules: {unknown}"
        )


def load_table(path: str | Path | None = None) -> FieldSpecTable:
    """Load and validate a field specification table.

    Args:
        path: YAML file to load. Defaults to the built-in
            ``health_checkup_v3`` table.

    Returns:
        The validated ``FieldSpecTable``.

    Raises:
        FileNotFoundError: If the YAML file does not exist.
        SpecValidationError: If the file is empty or references unknown rules.
        pydantic.ValidationError: If the content fails schema validation
            (including duplicate output keys).
    """
    path = Path(path) if path is not None else _FIELDSPECS_DIR / f"{DEFAULT_TABLE}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Field specification table not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise SpecValidationError(f"Field specification table is empty: {path}")

    table = FieldSpecTable.model_validate(raw)
    validate_rules(table)
    logger.info("Loaded field spec table '%s' (%d specs) from %s", table.name, len(table), path)
    return table


@lru_cache(maxsize=1)
def default_table() -> FieldSpecTable:
    """The built-in table, loaded once per process."""
    return load_table()


def list_tables(fieldspecs_dir: Path | None = None) -> list[str]:
    """Names of the YAML tables shipped in *fieldspecs_dir*."""
    fieldspecs_dir = fieldspecs_dir or _FIELDSPECS_DIR
    return sorted(p.stem for p in fieldspecs_dir.glob("*.yaml"))
