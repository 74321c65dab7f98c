"""Public API for safebom.

High-level functions over every accepted source form. Callers should use
these instead of importing from the kernel or _internal.
"""

import logging
from typing import List, Optional

from safebom._internal.sources import (
    DEFAULT_MAX_DOCUMENT_BYTES,
    DocumentTooLargeError,
    Source,
    read_source,
)
from safebom.codes import DiagnosticCode, Severity
from safebom.contracts import ValidationDiagnostic
from safebom.errors import ParseError
from safebom.kernel.deserializer import deserialize
from safebom.kernel.namespaces import extract_namespace_declarations, resolve_schema_version
from safebom.kernel.stamper import stamp
from safebom.kernel.validator import SchemaValidator
from safebom.kernel.versions import SchemaVersion
from safebom.model import Bom

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_MAX_DOCUMENT_BYTES",
    "parse",
    "validate",
    "is_valid",
    "detect_schema_version",
]


def _read_for_parse(source: Source, max_bytes: Optional[int]) -> bytes:
    try:
        return read_source(source, max_bytes=max_bytes)
    except DocumentTooLargeError as e:
        raise ParseError(str(e)) from e


def detect_schema_version(
    source: Source,
    *,
    max_bytes: Optional[int] = DEFAULT_MAX_DOCUMENT_BYTES,
) -> Optional[SchemaVersion]:
    """Detect which CycloneDX dialect a document was written in.

    Returns:
        The SchemaVersion of the first registered namespace declared in the
        document, or None when none is declared

    Raises:
        ParseError: If the document is not well-formed or too large
        OSError: If a path source cannot be read
    """
    data = _read_for_parse(source, max_bytes)
    return resolve_schema_version(extract_namespace_declarations(data))


def parse(
    source: Source,
    *,
    max_bytes: Optional[int] = DEFAULT_MAX_DOCUMENT_BYTES,
) -> Bom:
    """Parse a CycloneDX XML document into a Bom.

    The schema version is detected from namespace declarations alone and
    recorded as `Bom.spec_version`; deserialization never depends on it.
    The document is not schema-validated here (see validate()).

    Args:
        source: A path, a byte buffer, or a binary or text stream. Streams
            are read but not closed.
        max_bytes: Upper bound on document size; None disables the check

    Returns:
        The deserialized Bom

    Raises:
        ParseError: If the document is malformed, too large, or its content
            cannot be mapped onto the object model
        OSError: If a path source cannot be read
        TypeError: If the source is of an unsupported type
    """
    data = _read_for_parse(source, max_bytes)
    version = resolve_schema_version(extract_namespace_declarations(data))
    builder = deserialize(data)
    return stamp(builder, version).build()


def validate(
    source: Source,
    version: Optional[SchemaVersion] = None,
    *,
    max_bytes: Optional[int] = DEFAULT_MAX_DOCUMENT_BYTES,
    validator: Optional[SchemaValidator] = None,
) -> List[ValidationDiagnostic]:
    """Validate a document against a CycloneDX XML Schema.

    Document defects are returned as diagnostics, never raised.

    Args:
        source: A path, a byte buffer, or a binary or text stream
        version: Schema version to validate against; None means the latest
        max_bytes: Upper bound on document size; None disables the check
        validator: Validator to use instead of one backed by the
            process-wide schema cache

    Returns:
        Every diagnostic found; empty iff the document conforms

    Raises:
        SchemaResourceError: If the schema cannot be loaded or compiled
        OSError: If a path source cannot be read
        TypeError: If the source is of an unsupported type
    """
    try:
        data = read_source(source, max_bytes=max_bytes)
    except DocumentTooLargeError as e:
        return [
            ValidationDiagnostic(
                severity=Severity.FATAL,
                code=DiagnosticCode.DOCUMENT_TOO_LARGE,
                message=str(e),
                cause=e,
            )
        ]
    if validator is None:
        validator = SchemaValidator()
    diagnostics = validator.validate(data, version)
    logger.debug("validation produced %d diagnostic(s)", len(diagnostics))
    return diagnostics


def is_valid(
    source: Source,
    version: Optional[SchemaVersion] = None,
    *,
    max_bytes: Optional[int] = DEFAULT_MAX_DOCUMENT_BYTES,
    validator: Optional[SchemaValidator] = None,
) -> bool:
    """True iff validate() reports no diagnostics."""
    return not validate(source, version, max_bytes=max_bytes, validator=validator)
