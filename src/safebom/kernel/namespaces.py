"""Namespace sniffing and schema version resolution.

The sniffing pass is a streaming walk that records namespace
declarations and discards elements as soon as they close, so it never
holds more of the document than the current path.
"""

import io
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from lxml import etree

from safebom.errors import ParseError
from safebom.kernel.versions import SchemaVersion
from safebom.kernel.xmlparser import PARSER_OPTIONS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamespaceDeclaration:
    """A single xmlns or xmlns:prefix binding found in a document."""
    uri: str
    prefix: Optional[str] = None  # None for the default namespace


def extract_namespace_declarations(data: bytes) -> List[NamespaceDeclaration]:
    """Collect every namespace declaration in the document, at any depth.

    Producers are inconsistent about where they declare the BOM namespace,
    so the whole document is scanned, not just the root element.

    Args:
        data: Raw document bytes

    Returns:
        Distinct (prefix, uri) bindings in document order

    Raises:
        ParseError: If the document is not well-formed XML
    """
    declarations: List[NamespaceDeclaration] = []
    seen: Set[Tuple[Optional[str], str]] = set()

    try:
        for event, payload in etree.iterparse(
            io.BytesIO(data),
            events=("start-ns", "end"),
            remove_comments=True,
            remove_pis=True,
            **PARSER_OPTIONS,
        ):
            if event == "start-ns":
                prefix, uri = payload
                key = (prefix or None, uri)
                if key not in seen:
                    seen.add(key)
                    declarations.append(NamespaceDeclaration(uri=uri, prefix=prefix or None))
            else:
                payload.clear()
    except etree.XMLSyntaxError as e:
        raise ParseError(f"document is not well-formed XML: {e.msg}", line=e.lineno) from e

    return declarations


def resolve_schema_version(declarations: Iterable[NamespaceDeclaration]) -> Optional[SchemaVersion]:
    """Map namespace declarations to a schema version.

    The first declaration (in document order) whose URI exactly matches a
    registered namespace wins. Documents may carry unrelated namespaces
    (XML signatures, extensions); well-formed producers declare the BOM
    namespace near the root.

    Returns:
        The matching SchemaVersion, or None when no declaration matches
    """
    for declaration in declarations:
        version = SchemaVersion.from_namespace(declaration.uri)
        if version is not None:
            logger.debug("resolved schema version %s from %s", version, declaration.uri)
            return version
    logger.debug("no registered BOM namespace declared")
    return None
