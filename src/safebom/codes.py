"""Diagnostic code constants for safebom.api.validate().

These constants prevent stringly-typed severities and codes and ensure
client code matches on the correct values.
"""

from enum import Enum


class Severity(str, Enum):
    """How bad a validation diagnostic is."""

    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


class DiagnosticCode(str, Enum):
    """Validation diagnostic codes."""

    # Document is not well-formed XML; schema validation could not start
    NOT_WELL_FORMED = "NOT_WELL_FORMED"
    DOCUMENT_TOO_LARGE = "DOCUMENT_TOO_LARGE"

    # Schema conformance
    SCHEMA_VIOLATION = "SCHEMA_VIOLATION"
    SCHEMA_WARNING = "SCHEMA_WARNING"

    # Schema validation started but could not reach a verdict
    VALIDATION_ABORTED = "VALIDATION_ABORTED"
