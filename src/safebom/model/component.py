"""Component-level object model: components, hashes, licenses, pedigree."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class HashAlgorithm(str, Enum):
    MD5 = "MD5"
    SHA_1 = "SHA-1"
    SHA_256 = "SHA-256"
    SHA_384 = "SHA-384"
    SHA_512 = "SHA-512"
    SHA3_256 = "SHA3-256"
    SHA3_384 = "SHA3-384"
    SHA3_512 = "SHA3-512"
    BLAKE2B_256 = "BLAKE2b-256"
    BLAKE2B_384 = "BLAKE2b-384"
    BLAKE2B_512 = "BLAKE2b-512"
    BLAKE3 = "BLAKE3"


class ComponentType(str, Enum):
    APPLICATION = "application"
    FRAMEWORK = "framework"
    LIBRARY = "library"
    CONTAINER = "container"
    OPERATING_SYSTEM = "operating-system"
    DEVICE = "device"
    FIRMWARE = "firmware"
    FILE = "file"


class Scope(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    EXCLUDED = "excluded"


class Encoding(str, Enum):
    BASE64 = "base64"


class ExternalReferenceType(str, Enum):
    VCS = "vcs"
    ISSUE_TRACKER = "issue-tracker"
    WEBSITE = "website"
    ADVISORIES = "advisories"
    BOM = "bom"
    MAILING_LIST = "mailing-list"
    SOCIAL = "social"
    CHAT = "chat"
    DOCUMENTATION = "documentation"
    SUPPORT = "support"
    DISTRIBUTION = "distribution"
    LICENSE = "license"
    BUILD_META = "build-meta"
    BUILD_SYSTEM = "build-system"
    OTHER = "other"


class Hash(BaseModel):
    """An algorithm-tagged digest."""
    algorithm: HashAlgorithm
    value: str  # hex digest as written in the document

    model_config = ConfigDict(frozen=True, extra="forbid")


class AttachmentText(BaseModel):
    """Attached text (license text, SWID tag) with its payload decoded.

    `content` is always the decoded bytes; `encoding` records how the
    payload was represented in the document (None for plain text).
    """
    content_type: str = "text/plain"
    encoding: Optional[Encoding] = None
    content: bytes

    model_config = ConfigDict(frozen=True, extra="forbid")


class License(BaseModel):
    id: Optional[str] = None  # SPDX license ID, not checked against the SPDX list
    name: Optional[str] = None
    text: Optional[AttachmentText] = None
    url: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class LicenseChoice(BaseModel):
    """Either a list of licenses or an SPDX license expression."""
    licenses: Tuple[License, ...] = ()
    expression: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class OrganizationalContact(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class OrganizationalEntity(BaseModel):
    name: Optional[str] = None
    urls: Tuple[str, ...] = ()
    contacts: Tuple[OrganizationalContact, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")


class ExternalReference(BaseModel):
    type: ExternalReferenceType
    url: str
    comment: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class Swid(BaseModel):
    """ISO/IEC 19770-2 software identification tag."""
    tag_id: str
    name: str
    version: Optional[str] = None
    tag_version: Optional[int] = None
    patch: Optional[bool] = None
    text: Optional[AttachmentText] = None
    url: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class IdentifiableAction(BaseModel):
    timestamp: Optional[datetime] = None
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class Commit(BaseModel):
    uid: Optional[str] = None
    url: Optional[str] = None
    author: Optional[IdentifiableAction] = None
    committer: Optional[IdentifiableAction] = None
    message: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class Component(BaseModel):
    """A software or hardware component described by the BOM."""
    type: ComponentType
    name: str
    version: Optional[str] = None  # required by the 1.0-1.2 schemas, tolerated when absent
    bom_ref: Optional[str] = None
    mime_type: Optional[str] = None
    supplier: Optional[OrganizationalEntity] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    group: Optional[str] = None
    description: Optional[str] = None
    scope: Optional[Scope] = None
    hashes: Tuple[Hash, ...] = ()
    licenses: Optional[LicenseChoice] = None
    copyright: Optional[str] = None
    cpe: Optional[str] = None
    purl: Optional[str] = None
    swid: Optional[Swid] = None
    modified: Optional[bool] = None  # required in 1.0, superseded by pedigree
    pedigree: Optional[Pedigree] = None
    external_references: Tuple[ExternalReference, ...] = ()
    components: Tuple[Component, ...] = Field(default=(), description="Nested sub-components")

    model_config = ConfigDict(frozen=True, extra="forbid")


class Pedigree(BaseModel):
    """Component ancestry: what it was derived from and how it changed."""
    ancestors: Tuple[Component, ...] = ()
    descendants: Tuple[Component, ...] = ()
    variants: Tuple[Component, ...] = ()
    commits: Tuple[Commit, ...] = ()
    notes: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


Component.model_rebuild()
Pedigree.model_rebuild()
