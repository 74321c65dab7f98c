"""Root aggregate of the object model.

`Bom.spec_version` records which schema dialect the document was read
from. It is provenance, not content: no constructor argument or public
setter reaches it. The only write path is BomBuilder._set_spec_version,
which the version stamper uses before the Bom is built.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, PrivateAttr

from safebom.model.component import (
    Component,
    ExternalReference,
    Hash,
    LicenseChoice,
    OrganizationalContact,
    OrganizationalEntity,
)

if TYPE_CHECKING:
    from safebom.kernel.versions import SchemaVersion


class Tool(BaseModel):
    """A tool used to create the BOM."""
    vendor: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    hashes: Tuple[Hash, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")


class Metadata(BaseModel):
    timestamp: Optional[datetime] = None
    tools: Tuple[Tool, ...] = ()
    authors: Tuple[OrganizationalContact, ...] = ()
    component: Optional[Component] = None
    manufacture: Optional[OrganizationalEntity] = None
    supplier: Optional[OrganizationalEntity] = None
    licenses: Optional[LicenseChoice] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class Dependency(BaseModel):
    """A node of the dependency graph, referring to a component by bom-ref."""
    ref: str
    dependencies: Tuple[Dependency, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")


class Bom(BaseModel):
    """A deserialized bill of materials."""
    version: int = 1
    serial_number: Optional[str] = None
    metadata: Optional[Metadata] = None
    components: Tuple[Component, ...] = ()
    external_references: Tuple[ExternalReference, ...] = ()
    dependencies: Tuple[Dependency, ...] = ()

    _spec_version: Optional[str] = PrivateAttr(default=None)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def spec_version(self) -> Optional[str]:
        """Schema version the document was detected as, e.g. "1.2".

        None when detection found no registered namespace.
        """
        return self._spec_version


class BomBuilder:
    """Mutable staging area between deserialization and the frozen Bom.

    Holds already-validated field values. Ordinary callers never see a
    builder; they receive the Bom produced by build().
    """

    def __init__(self, fields: Dict[str, Any]):
        self._fields = dict(fields)
        self._spec_version: Optional[str] = None

    def _set_spec_version(self, version: SchemaVersion) -> None:
        from safebom.kernel.versions import SchemaVersion

        if not isinstance(version, SchemaVersion):
            raise TypeError(f"spec version must be a SchemaVersion, got {type(version).__name__}")
        self._spec_version = version.version_string

    def build(self) -> Bom:
        bom = Bom.model_validate(self._fields)
        bom._spec_version = self._spec_version
        return bom


Dependency.model_rebuild()
