"""
Custom exception hierarchy for checkup-derive.

Every exception carries the ``ErrorCode`` it maps to, so the outcome
boundary (dispatcher / ``process_file``) can turn any of them into a
``Failure`` without a lookup table.

Three classes of error are kept apart:
- configuration errors (``SpecValidationError``) -- a defect in the field
  specification table itself;
- data errors (``MissingFieldError``, ``DerivationError`` and the ingestion
  errors) -- expected and routine for real questionnaire records;
- anything else is an unexpected fault and is reported as ``UNKNOWN``.
"""

from checkup_derive.outcome import ErrorCode


class CheckupDeriveError(Exception):
    """Base exception for all checkup-derive errors."""

    code: ErrorCode = ErrorCode.UNKNOWN


class SpecValidationError(CheckupDeriveError):
    """Raised when a field specification (or table, or config) is malformed.

    For example:
    - A field spec lists no input fields.
    - The number of input fields does not match the rule's arity.
    - A spec references a rule name that is not registered.
    - Two specs share the same output key.
    """

    code = ErrorCode.INVALID_SPEC


class MissingFieldError(CheckupDeriveError):
    """Raised when a raw record lacks a field that a spec requires.

    An *absent* key is a missing field; a key present with an empty string
    is a valid "not answered" response and never raises this.
    """

    code = ErrorCode.MISSING_FIELD

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Raw field '{field_name}' does not exist")
        self.field_name = field_name


class DerivationError(CheckupDeriveError):
    """Raised by a rule when its inputs are unparsable or implausible."""

    code = ErrorCode.DERIVATION_FAILED


class SourceReadError(CheckupDeriveError):
    """Raised when the source file cannot be read or has an unsupported type."""

    code = ErrorCode.FILE_READ


class EnvelopeParseError(CheckupDeriveError):
    """Raised when the XML envelope is malformed or lacks GetDataResult."""

    code = ErrorCode.ENVELOPE_PARSE


class PayloadParseError(CheckupDeriveError):
    """Raised when the JSON payload is malformed or not a string mapping."""

    code = ErrorCode.PAYLOAD_PARSE


class NoRecordError(CheckupDeriveError):
    """Raised when the envelope reports ``HaveData == "no"``."""

    code = ErrorCode.NO_RECORD


class ComparisonError(CheckupDeriveError):
    """Raised when a reference sheet cannot be read or lacks required columns."""
