"""Typed, immutable CycloneDX object model.

Every class the deserializer is able to construct lives in this package.
"""

from .component import (
    AttachmentText,
    Commit,
    Component,
    ComponentType,
    Encoding,
    ExternalReference,
    ExternalReferenceType,
    Hash,
    HashAlgorithm,
    IdentifiableAction,
    License,
    LicenseChoice,
    OrganizationalContact,
    OrganizationalEntity,
    Pedigree,
    Scope,
    Swid,
)
from .bom import Bom, BomBuilder, Dependency, Metadata, Tool

__all__ = [
    "AttachmentText",
    "Bom",
    "BomBuilder",
    "Commit",
    "Component",
    "ComponentType",
    "Dependency",
    "Encoding",
    "ExternalReference",
    "ExternalReferenceType",
    "Hash",
    "HashAlgorithm",
    "IdentifiableAction",
    "License",
    "LicenseChoice",
    "Metadata",
    "OrganizationalContact",
    "OrganizationalEntity",
    "Pedigree",
    "Scope",
    "Swid",
    "Tool",
]
