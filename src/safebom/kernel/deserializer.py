"""Allow-listed deserialization of BOM documents into the object model.

Types are resolved through a static table keyed by model class and
local element name. No string taken from the document is ever used to
look up or construct a type: an element either matches an entry in the
table or is dropped. The set of constructible types is therefore exactly
the set of classes the table names (ALLOWED_TYPES).

Tolerant reading:
- Elements outside the document's BOM namespace are dropped (unless the
  entry lists that namespace explicitly)
- Unmapped elements and attributes are dropped
- Namespaced attributes (xsi:type, class hints from other serializers)
  are never consulted
If dropping leaves a required field empty, model validation fails and
the document is rejected with ParseError.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple, Type

from lxml import etree
from pydantic import BaseModel, ValidationError

from safebom.errors import ParseError
from safebom.kernel.converters import (
    convert_attachment,
    convert_bool,
    convert_enum,
    convert_hash,
    convert_int,
    convert_timestamp,
    element_text,
)
from safebom.kernel.versions import NS_DEPENDENCY_GRAPH_10, VERSION_LATEST, SchemaVersion
from safebom.kernel.xmlparser import parse_document
from safebom.model import (
    AttachmentText,
    Bom,
    BomBuilder,
    Commit,
    Component,
    ComponentType,
    Dependency,
    ExternalReference,
    ExternalReferenceType,
    Hash,
    IdentifiableAction,
    License,
    LicenseChoice,
    Metadata,
    OrganizationalContact,
    OrganizationalEntity,
    Pedigree,
    Scope,
    Swid,
    Tool,
)

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "bom"


@dataclass(frozen=True)
class _Context:
    """Per-document state threaded through the walk."""
    bom_namespace: Optional[str]  # None for a document without a default namespace


ElementConverter = Callable[[etree._Element, _Context], Any]


@dataclass(frozen=True)
class _Child:
    """How one child element maps onto a model field."""
    field: str
    convert: ElementConverter
    repeated: bool = False
    namespaces: FrozenSet[str] = frozenset()  # accepted in addition to the BOM namespace

    def accepts(self, namespace: Optional[str], ctx: _Context) -> bool:
        return namespace == ctx.bom_namespace or namespace in self.namespaces


@dataclass(frozen=True)
class _Attribute:
    field: str
    convert: Callable[[str], Any] = str


@dataclass(frozen=True)
class _TypeMapping:
    children: Mapping[str, _Child] = field(default_factory=dict)
    attributes: Mapping[str, _Attribute] = field(default_factory=dict)


def _text(element: etree._Element, ctx: _Context) -> str:
    return element_text(element)


def _scalar(convert: Callable[[str], Any]) -> ElementConverter:
    return lambda element, ctx: convert(element_text(element))


def _enum(enum_cls) -> Callable[[str], Any]:
    return lambda token: convert_enum(enum_cls, token)


def _nested(model: Type[BaseModel]) -> ElementConverter:
    return lambda element, ctx: _build(model, element, ctx)


def _wrapped(
    item_name: str,
    convert: ElementConverter,
    namespaces: FrozenSet[str] = frozenset(),
) -> ElementConverter:
    """Convert a wrapper element (<components>) into a tuple of its items."""
    item = _Child(field=item_name, convert=convert, repeated=True, namespaces=namespaces)

    def convert_items(element: etree._Element, ctx: _Context) -> Tuple[Any, ...]:
        items = []
        for child, namespace, local_name in _iter_children(element):
            if local_name != item_name or not item.accepts(namespace, ctx):
                _log_dropped(child, namespace, local_name)
                continue
            items.append(convert(child, ctx))
        return tuple(items)

    return convert_items


_DEPENDENCY_NAMESPACES = frozenset({NS_DEPENDENCY_GRAPH_10})

_CONTACT = _TypeMapping(
    children={
        "name": _Child("name", _text),
        "email": _Child("email", _text),
        "phone": _Child("phone", _text),
    },
)

_ENTITY = _TypeMapping(
    children={
        "name": _Child("name", _text),
        "url": _Child("urls", _text, repeated=True),
        "contact": _Child("contacts", _nested(OrganizationalContact), repeated=True),
    },
)

_TOOL = _TypeMapping(
    children={
        "vendor": _Child("vendor", _text),
        "name": _Child("name", _text),
        "version": _Child("version", _text),
        "hashes": _Child("hashes", _wrapped("hash", lambda element, ctx: convert_hash(element))),
    },
)

_LICENSE = _TypeMapping(
    children={
        "id": _Child("id", _text),
        "name": _Child("name", _text),
        "text": _Child("text", lambda element, ctx: convert_attachment(element)),
        "url": _Child("url", _text),
    },
)

_LICENSE_CHOICE = _TypeMapping(
    children={
        "license": _Child("licenses", _nested(License), repeated=True),
        "expression": _Child("expression", _text),
    },
)

_EXTERNAL_REFERENCE = _TypeMapping(
    children={
        "url": _Child("url", _text),
        "comment": _Child("comment", _text),
    },
    attributes={
        "type": _Attribute("type", _enum(ExternalReferenceType)),
    },
)

_SWID = _TypeMapping(
    children={
        "text": _Child("text", lambda element, ctx: convert_attachment(element)),
        "url": _Child("url", _text),
    },
    attributes={
        "tagId": _Attribute("tag_id"),
        "name": _Attribute("name"),
        "version": _Attribute("version"),
        "tagVersion": _Attribute("tag_version", convert_int),
        "patch": _Attribute("patch", convert_bool),
    },
)

_IDENTIFIABLE_ACTION = _TypeMapping(
    children={
        "timestamp": _Child("timestamp", _scalar(convert_timestamp)),
        "name": _Child("name", _text),
        "email": _Child("email", _text),
    },
)

_COMMIT = _TypeMapping(
    children={
        "uid": _Child("uid", _text),
        "url": _Child("url", _text),
        "author": _Child("author", _nested(IdentifiableAction)),
        "committer": _Child("committer", _nested(IdentifiableAction)),
        "message": _Child("message", _text),
    },
)

_PEDIGREE = _TypeMapping(
    children={
        "ancestors": _Child("ancestors", _wrapped("component", _nested(Component))),
        "descendants": _Child("descendants", _wrapped("component", _nested(Component))),
        "variants": _Child("variants", _wrapped("component", _nested(Component))),
        "commits": _Child("commits", _wrapped("commit", _nested(Commit))),
        "notes": _Child("notes", _text),
    },
)

_EXTERNAL_REFERENCES = _Child(
    "external_references", _wrapped("reference", _nested(ExternalReference))
)

_COMPONENT = _TypeMapping(
    children={
        "supplier": _Child("supplier", _nested(OrganizationalEntity)),
        "author": _Child("author", _text),
        "publisher": _Child("publisher", _text),
        "group": _Child("group", _text),
        "name": _Child("name", _text),
        "version": _Child("version", _text),
        "description": _Child("description", _text),
        "scope": _Child("scope", _scalar(_enum(Scope))),
        "hashes": _Child("hashes", _wrapped("hash", lambda element, ctx: convert_hash(element))),
        "licenses": _Child("licenses", _nested(LicenseChoice)),
        "copyright": _Child("copyright", _text),
        "cpe": _Child("cpe", _text),
        "purl": _Child("purl", _text),
        "swid": _Child("swid", _nested(Swid)),
        "modified": _Child("modified", _scalar(convert_bool)),
        "pedigree": _Child("pedigree", _nested(Pedigree)),
        "externalReferences": _EXTERNAL_REFERENCES,
        "components": _Child("components", _wrapped("component", _nested(Component))),
    },
    attributes={
        "type": _Attribute("type", _enum(ComponentType)),
        "bom-ref": _Attribute("bom_ref"),
        "mime-type": _Attribute("mime_type"),
    },
)

_METADATA = _TypeMapping(
    children={
        "timestamp": _Child("timestamp", _scalar(convert_timestamp)),
        "tools": _Child("tools", _wrapped("tool", _nested(Tool))),
        "authors": _Child("authors", _wrapped("author", _nested(OrganizationalContact))),
        "component": _Child("component", _nested(Component)),
        "manufacture": _Child("manufacture", _nested(OrganizationalEntity)),
        "supplier": _Child("supplier", _nested(OrganizationalEntity)),
        "licenses": _Child("licenses", _nested(LicenseChoice)),
    },
)

_DEPENDENCY = _TypeMapping(
    children={
        "dependency": _Child(
            "dependencies", _nested(Dependency), repeated=True, namespaces=_DEPENDENCY_NAMESPACES
        ),
    },
    attributes={
        "ref": _Attribute("ref"),
    },
)

_BOM = _TypeMapping(
    children={
        "metadata": _Child("metadata", _nested(Metadata)),
        "components": _Child("components", _wrapped("component", _nested(Component))),
        "externalReferences": _EXTERNAL_REFERENCES,
        "dependencies": _Child(
            "dependencies",
            _wrapped("dependency", _nested(Dependency), namespaces=_DEPENDENCY_NAMESPACES),
            namespaces=_DEPENDENCY_NAMESPACES,
        ),
    },
    attributes={
        "version": _Attribute("version", convert_int),
        "serialNumber": _Attribute("serial_number"),
    },
)

_TYPE_TABLE: Dict[Type[BaseModel], _TypeMapping] = {
    Bom: _BOM,
    Metadata: _METADATA,
    Tool: _TOOL,
    OrganizationalContact: _CONTACT,
    OrganizationalEntity: _ENTITY,
    Component: _COMPONENT,
    License: _LICENSE,
    LicenseChoice: _LICENSE_CHOICE,
    ExternalReference: _EXTERNAL_REFERENCE,
    Swid: _SWID,
    Pedigree: _PEDIGREE,
    Commit: _COMMIT,
    IdentifiableAction: _IDENTIFIABLE_ACTION,
    Dependency: _DEPENDENCY,
}

# Hash and AttachmentText are produced by their scalar converters
ALLOWED_TYPES: FrozenSet[type] = frozenset(_TYPE_TABLE) | frozenset({Hash, AttachmentText})


def _iter_children(element: etree._Element):
    """Yield (child, namespace, local name) for element children only."""
    for child in element:
        if not isinstance(child.tag, str):
            continue  # entity references left unresolved by the hardened parser
        qname = etree.QName(child)
        yield child, qname.namespace, qname.localname


def _log_dropped(element: etree._Element, namespace: Optional[str], local_name: str) -> None:
    logger.debug(
        "dropping unmapped element {%s}%s at line %s", namespace or "", local_name, element.sourceline
    )


def _collect(mapping: _TypeMapping, element: etree._Element, ctx: _Context) -> Dict[str, Any]:
    values: Dict[str, Any] = {}

    for name, rule in mapping.attributes.items():
        raw = element.get(name)
        if raw is not None:
            values[rule.field] = rule.convert(raw)

    for child, namespace, local_name in _iter_children(element):
        rule = mapping.children.get(local_name)
        if rule is None or not rule.accepts(namespace, ctx):
            _log_dropped(child, namespace, local_name)
            continue
        value = rule.convert(child, ctx)
        if rule.repeated:
            values.setdefault(rule.field, []).append(value)
        else:
            values[rule.field] = value

    return values


def _build(model: Type[BaseModel], element: etree._Element, ctx: _Context) -> BaseModel:
    """Construct `model` from `element` using its table entry."""
    values = _collect_checked(model, element, ctx)
    try:
        return model.model_validate(values)
    except ValidationError as e:
        raise ParseError(_describe(model, e), line=element.sourceline) from e


def _collect_checked(model: Type[BaseModel], element: etree._Element, ctx: _Context) -> Dict[str, Any]:
    mapping = _TYPE_TABLE[model]
    try:
        return _collect(mapping, element, ctx)
    except ParseError:
        raise
    except ValueError as e:
        raise ParseError(f"<{etree.QName(element).localname}>: {e}", line=element.sourceline) from e


def _describe(model: Type[BaseModel], error: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in detail['loc']) or model.__name__}: {detail['msg']}"
        for detail in error.errors()
    )
    return f"invalid {model.__name__}: {problems}"


def deserialize(data: bytes) -> BomBuilder:
    """Deserialize document bytes into a BomBuilder.

    The root element must be <bom>; its namespace becomes the namespace
    every mapped child must share. Unregistered namespaces are read with
    the latest version's table, which is the table for every version.

    Raises:
        ParseError: If the document is malformed, its root is not <bom>,
            or mapped content fails conversion
    """
    try:
        root = parse_document(data)
    except etree.XMLSyntaxError as e:
        raise ParseError(f"document is not well-formed XML: {e.msg}", line=e.lineno) from e

    qname = etree.QName(root)
    if qname.localname != ROOT_ELEMENT:
        raise ParseError(f"root element {root.tag!r} is not a BOM element", line=root.sourceline)
    if SchemaVersion.from_namespace(qname.namespace or "") is None:
        logger.debug(
            "root namespace %r is not registered; reading as CycloneDX %s", qname.namespace, VERSION_LATEST
        )

    ctx = _Context(bom_namespace=qname.namespace)
    fields = _collect_checked(Bom, root, ctx)
    try:
        Bom.model_validate(fields)
    except ValidationError as e:
        raise ParseError(_describe(Bom, e), line=root.sourceline) from e
    return BomBuilder(fields)
