"""safebom: safe reading and validation of CycloneDX XML bills of materials."""

import logging
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("safebom")
except PackageNotFoundError:
    __version__ = "dev"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from safebom.api import parse, validate, is_valid, detect_schema_version
from safebom.codes import DiagnosticCode, Severity
from safebom.contracts import ValidationDiagnostic
from safebom.errors import ParseError, SchemaResourceError
from safebom.kernel.versions import SchemaVersion, VERSION_LATEST
from safebom.model import Bom

__all__ = [
    "__version__",
    "parse",
    "validate",
    "is_valid",
    "detect_schema_version",
    "Bom",
    "SchemaVersion",
    "VERSION_LATEST",
    "ValidationDiagnostic",
    "Severity",
    "DiagnosticCode",
    "ParseError",
    "SchemaResourceError",
]
