"""Schema resource I/O helpers (internal)."""

from importlib import resources
from pathlib import Path
from typing import Optional, Union

from safebom.errors import SchemaResourceError
from safebom.kernel.versions import SchemaVersion


def schema_resource_name(version: SchemaVersion) -> str:
    return f"bom-{version.version_string}.xsd"


def load_schema_bytes(version: SchemaVersion, schema_dir: Optional[Union[str, Path]] = None) -> bytes:
    """Load the XML Schema definition for a version.

    Args:
        version: Schema version to load
        schema_dir: Directory to read bom-<version>.xsd from instead of the
            packaged resources

    Returns:
        Schema definition bytes

    Raises:
        SchemaResourceError: If the resource is missing or unreadable
    """
    name = schema_resource_name(version)
    if schema_dir is not None:
        resource = Path(schema_dir) / name
    else:
        resource = resources.files("safebom").joinpath("schemas").joinpath(name)
    try:
        return resource.read_bytes()
    except OSError as e:
        raise SchemaResourceError(f"schema resource {name} for CycloneDX {version} is unavailable: {e}") from e
