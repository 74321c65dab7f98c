"""Public result models for safebom package."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from safebom.codes import DiagnosticCode, Severity


class ValidationDiagnostic(BaseModel):
    """A single problem found while validating a document.

    Diagnostics are collected, never raised.
    """
    severity: Severity
    code: DiagnosticCode
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    error_type: Optional[str] = None  # libxml2 error type name, e.g. "SCHEMAV_CVC_COMPLEX_TYPE_2_4"
    cause: Optional[BaseException] = Field(default=None, exclude=True, repr=False)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def __str__(self) -> str:
        if self.line is None:
            location = ""
        elif self.column is None:
            location = f"{self.line}: "
        else:
            location = f"{self.line}:{self.column}: "
        return f"{self.severity.value}: {location}{self.message}"
