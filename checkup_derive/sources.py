"""
Raw record ingestion for checkup-derive.

Two source formats are supported, selected by file extension:

- ``.xml`` -- the checkup service's SOAP response envelope. The record
  lives at ``Envelope/Body/GetDataResponse/GetDataResult`` as a JSON
  string ``{"HaveData": "yes" | "no", "Data": {field: value, ...}}``.
- ``.txt`` -- a flat JSON object ``{field: value, ...}`` (the ``Data``
  part on its own, as exported for offline checks).

Element lookup matches local names only, so envelopes with or without
SOAP namespace prefixes are read the same way.

Every failure is raised as the ingestion exception carrying its
``ErrorCode``; ``_pipeline.process_file`` turns those into ``Failure``.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path
from typing import Any

from checkup_derive.exceptions import (
    EnvelopeParseError,
    NoRecordError,
    PayloadParseError,
    SourceReadError,
)

logger = logging.getLogger(__name__)

# Element path from the envelope root down to the JSON payload
_RESULT_PATH = ("Body", "GetDataResponse", "GetDataResult")


def _local(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise SourceReadError(f"Cannot read {path}: {exc}") from exc


def _as_record(data: Any, where: str) -> dict[str, str]:
    """Validate that *data* is a ``str -> str`` mapping."""
    if not isinstance(data, dict):
        raise PayloadParseError(f"{where} is not a JSON object")
    bad = [key for key, value in data.items() if not isinstance(value, str)]
    if bad:
        raise PayloadParseError(f"{where} has non-string values for fields: {bad[:5]}")
    return data


def _find_result(root: ET.Element) -> ET.Element | None:
    node: ET.Element | None = root
    for name in _RESULT_PATH:
        node = next((child for child in node if _local(child.tag) == name), None)
        if node is None:
            return None
    return node


def read_envelope(path: Path) -> dict[str, str]:
    """Read a raw record from an XML response envelope.

    Raises:
        SourceReadError: The file cannot be read.
        EnvelopeParseError: Malformed XML or no ``GetDataResult`` element.
        PayloadParseError: ``GetDataResult`` is not the expected JSON.
        NoRecordError: The payload reports ``HaveData == "no"``.
    """
    content = _read_bytes(path)
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise EnvelopeParseError(f"{path.name}: {exc}") from exc

    result = _find_result(root)
    if result is None:
        raise EnvelopeParseError(
            f"{path.name}: element {'/'.join(_RESULT_PATH)} not found"
        )

    try:
        payload = json.loads(result.text or "")
    except json.JSONDecodeError as exc:
        raise PayloadParseError(f"GetDataResult: {exc}") from exc
    if not isinstance(payload, dict):
        raise PayloadParseError("GetDataResult is not a JSON object")

    if payload.get("HaveData") == "no":
        raise NoRecordError(f"{path.name}: HaveData is 'no'")
    return _as_record(payload.get("Data", {}), "GetDataResult.Data")


def read_flat_json(path: Path) -> dict[str, str]:
    """Read a raw record stored as a flat JSON object."""
    content = _read_bytes(path)
    try:
        data = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PayloadParseError(f"{path.name}: {exc}") from exc
    return _as_record(data, path.name)


_READERS: dict[str, Callable[[Path], dict[str, str]]] = {
    ".xml": read_envelope,
    ".txt": read_flat_json,
}


def read_record(path: str | Path) -> dict[str, str]:
    """Read the raw record held in *path*, choosing the reader by extension.

    Raises:
        SourceReadError: Unsupported extension or unreadable file.
        EnvelopeParseError, PayloadParseError, NoRecordError: See the
            individual readers.
    """
    path = Path(path)
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise SourceReadError(
            f"Unsupported file format '{path.suffix}'. Supported: {sorted(_READERS)}"
        )
    record = reader(path)
    logger.info("Read %d raw fields from %s", len(record), path)
    return record
