"""CycloneDX schema version registry.

A closed, ordered table of the XML dialects safebom understands. Each
version is identified by its canonical namespace URI.
"""

from enum import Enum
from typing import Optional

NS_BOM_10 = "http://cyclonedx.org/schema/bom/1.0"
NS_BOM_11 = "http://cyclonedx.org/schema/bom/1.1"
NS_BOM_12 = "http://cyclonedx.org/schema/bom/1.2"

# BOM 1.1 carried the dependency graph as an extension
NS_DEPENDENCY_GRAPH_10 = "http://cyclonedx.org/schema/ext/dependency-graph/1.0"


class SchemaVersion(Enum):
    """A CycloneDX XML schema version."""

    VERSION_10 = ("1.0", NS_BOM_10)
    VERSION_11 = ("1.1", NS_BOM_11)
    VERSION_12 = ("1.2", NS_BOM_12)

    def __init__(self, version_string: str, namespace: str):
        self.version_string = version_string
        self.namespace = namespace

    def __lt__(self, other: "SchemaVersion") -> bool:
        if not isinstance(other, SchemaVersion):
            return NotImplemented
        return _ORDER.index(self) < _ORDER.index(other)

    def __le__(self, other: "SchemaVersion") -> bool:
        if not isinstance(other, SchemaVersion):
            return NotImplemented
        return self is other or self < other

    def __str__(self) -> str:
        return self.version_string

    @classmethod
    def from_namespace(cls, uri: str) -> Optional["SchemaVersion"]:
        """Exact match of a namespace URI against the registry."""
        return _BY_NAMESPACE.get(uri)

    @classmethod
    def from_version_string(cls, value: str) -> Optional["SchemaVersion"]:
        return _BY_VERSION_STRING.get(value)


_ORDER = list(SchemaVersion)
_BY_NAMESPACE = {version.namespace: version for version in SchemaVersion}
_BY_VERSION_STRING = {version.version_string: version for version in SchemaVersion}

VERSION_LATEST = _ORDER[-1]
NS_BOM_LATEST = VERSION_LATEST.namespace
