"""XML Schema validation that reports, rather than raises, document defects.

Compiled schemas are the only state shared between calls. SchemaCache
compiles each version at most once: lookups take a lock-free fast path,
and a miss compiles under the cache lock after re-checking. An lxml
XMLSchema keeps its error log on the instance, so each compiled schema
runs validation under its own lock.
"""

import logging
import threading
from pathlib import PurePath
from typing import Callable, Dict, List, Optional, Union

from lxml import etree

from safebom._internal.io.schemas import load_schema_bytes
from safebom.codes import DiagnosticCode, Severity
from safebom.contracts import ValidationDiagnostic
from safebom.errors import SchemaResourceError
from safebom.kernel.versions import VERSION_LATEST, SchemaVersion
from safebom.kernel.xmlparser import make_parser, parse_document

logger = logging.getLogger(__name__)

SchemaLoader = Callable[[SchemaVersion], bytes]

_SEVERITY_BY_LEVEL = {
    etree.ErrorLevels.WARNING: Severity.WARNING,
    etree.ErrorLevels.ERROR: Severity.ERROR,
    etree.ErrorLevels.FATAL: Severity.FATAL,
}


class CompiledSchema:
    """A compiled schema for one version, safe to share between threads."""

    def __init__(self, version: SchemaVersion, schema: etree.XMLSchema):
        self.version = version
        self._schema = schema
        self._lock = threading.Lock()

    def check(self, document: etree._Element) -> List[ValidationDiagnostic]:
        with self._lock:
            try:
                self._schema.validate(document)
            except etree.XMLSchemaValidateError as e:
                # libxml2 gives up on some trees, e.g. unexpanded entity references
                return _aborted_diagnostics(e, list(self._schema.error_log))
            entries = list(self._schema.error_log)
        return [_diagnostic_from_entry(entry) for entry in entries]


class SchemaCache:
    """Process-wide cache of compiled schemas, one per SchemaVersion.

    Args:
        loader: Returns the schema definition bytes for a version. Defaults
            to the packaged resources (or `schema_dir` when given).
        schema_dir: Directory holding bom-<version>.xsd files that replace
            the packaged resources
    """

    def __init__(
        self,
        loader: Optional[SchemaLoader] = None,
        schema_dir: Optional[Union[str, PurePath]] = None,
    ):
        if loader is None:
            def loader(version: SchemaVersion) -> bytes:
                return load_schema_bytes(version, schema_dir=schema_dir)

        self._loader = loader
        self._schemas: Dict[SchemaVersion, CompiledSchema] = {}
        self._lock = threading.Lock()

    def get(self, version: SchemaVersion) -> CompiledSchema:
        """Return the compiled schema for `version`, compiling it on first use.

        Raises:
            SchemaResourceError: If the schema cannot be loaded or compiled
        """
        compiled = self._schemas.get(version)
        if compiled is not None:
            return compiled
        with self._lock:
            compiled = self._schemas.get(version)
            if compiled is None:
                compiled = self._compile(version)
                self._schemas[version] = compiled
        return compiled

    def clear(self) -> None:
        with self._lock:
            self._schemas.clear()

    def __contains__(self, version: SchemaVersion) -> bool:
        return version in self._schemas

    def _compile(self, version: SchemaVersion) -> CompiledSchema:
        data = self._loader(version)
        try:
            schema = etree.XMLSchema(etree.fromstring(data, parser=make_parser()))
        except (etree.XMLSyntaxError, etree.XMLSchemaParseError) as e:
            raise SchemaResourceError(f"schema for CycloneDX {version} could not be compiled: {e}") from e
        logger.debug("compiled schema for CycloneDX %s", version)
        return CompiledSchema(version, schema)


DEFAULT_SCHEMA_CACHE = SchemaCache()


class SchemaValidator:
    """Validates documents against a CycloneDX schema version."""

    def __init__(self, cache: Optional[SchemaCache] = None):
        self._cache = cache if cache is not None else DEFAULT_SCHEMA_CACHE

    def validate(self, data: bytes, version: Optional[SchemaVersion] = None) -> List[ValidationDiagnostic]:
        """Validate document bytes, collecting every diagnostic.

        Args:
            data: Raw document bytes
            version: Target schema version; None means the latest

        Returns:
            Diagnostics in the order they were reported; empty iff the
            document conforms to the schema

        Raises:
            SchemaResourceError: If the schema cannot be loaded or compiled
        """
        if version is None:
            version = VERSION_LATEST
        compiled = self._cache.get(version)
        try:
            document = parse_document(data)
        except etree.XMLSyntaxError as e:
            return _syntax_diagnostics(e)
        return compiled.check(document)

    def is_valid(self, data: bytes, version: Optional[SchemaVersion] = None) -> bool:
        return not self.validate(data, version)


def _diagnostic_from_entry(entry) -> ValidationDiagnostic:
    severity = _SEVERITY_BY_LEVEL.get(entry.level, Severity.ERROR)
    return ValidationDiagnostic(
        severity=severity,
        code=DiagnosticCode.SCHEMA_WARNING if severity is Severity.WARNING else DiagnosticCode.SCHEMA_VIOLATION,
        message=entry.message,
        line=entry.line or None,
        column=entry.column or None,
        error_type=entry.type_name,
    )


def _syntax_diagnostics(error: etree.XMLSyntaxError) -> List[ValidationDiagnostic]:
    """Well-formedness failures are always fatal: validation cannot start."""
    entries = list(error.error_log)
    if not entries:
        return [
            ValidationDiagnostic(
                severity=Severity.FATAL,
                code=DiagnosticCode.NOT_WELL_FORMED,
                message=error.msg or str(error),
                line=error.lineno or None,
                cause=error,
            )
        ]
    return [
        ValidationDiagnostic(
            severity=Severity.FATAL,
            code=DiagnosticCode.NOT_WELL_FORMED,
            message=entry.message,
            line=entry.line or None,
            column=entry.column or None,
            error_type=entry.type_name,
            cause=error,
        )
        for entry in entries
    ]


def _aborted_diagnostics(error: etree.XMLSchemaValidateError, entries) -> List[ValidationDiagnostic]:
    """Validation stopped before reaching a verdict: report it as fatal."""
    diagnostics = [
        ValidationDiagnostic(
            severity=Severity.FATAL,
            code=DiagnosticCode.VALIDATION_ABORTED,
            message=str(error) or "schema validation could not complete",
            cause=error,
        )
    ]
    diagnostics.extend(_diagnostic_from_entry(entry) for entry in entries)
    return diagnostics
