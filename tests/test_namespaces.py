"""Tests for namespace sniffing and schema version resolution."""

import pytest

from safebom.errors import ParseError
from safebom.kernel.namespaces import (
    NamespaceDeclaration,
    extract_namespace_declarations,
    resolve_schema_version,
)
from safebom.kernel.versions import NS_BOM_11, NS_BOM_12, SchemaVersion

DSIG = "http://www.w3.org/2000/09/xmldsig#"


class TestExtractNamespaceDeclarations:
    """Tests for extract_namespace_declarations."""

    def test_single_default_namespace(self, fixture_bytes):
        declarations = extract_namespace_declarations(fixture_bytes("bom-1.0.xml"))
        assert declarations == [NamespaceDeclaration(uri="http://cyclonedx.org/schema/bom/1.0")]

    def test_document_order_and_prefixes(self, fixture_bytes):
        declarations = extract_namespace_declarations(fixture_bytes("signed.xml"))
        assert declarations == [
            NamespaceDeclaration(uri=DSIG, prefix="ds"),
            NamespaceDeclaration(uri=NS_BOM_12),
        ]

    def test_declarations_below_the_root_are_found(self):
        data = (
            b"<root>"
            b"<a><b xmlns:x='urn:example:x'/></a>"
            b"<c xmlns='http://cyclonedx.org/schema/bom/1.1'/>"
            b"</root>"
        )
        declarations = extract_namespace_declarations(data)
        assert [d.uri for d in declarations] == ["urn:example:x", NS_BOM_11]

    def test_repeated_binding_reported_once(self):
        data = b"<r><a xmlns:p='urn:p'/><b xmlns:p='urn:p'/><c xmlns:q='urn:p'/></r>"
        declarations = extract_namespace_declarations(data)
        assert declarations == [
            NamespaceDeclaration(uri="urn:p", prefix="p"),
            NamespaceDeclaration(uri="urn:p", prefix="q"),
        ]

    def test_no_declarations(self, fixture_bytes):
        assert extract_namespace_declarations(fixture_bytes("no-namespace.xml")) == []

    def test_malformed_document_raises_parse_error(self, fixture_bytes):
        with pytest.raises(ParseError) as exc_info:
            extract_namespace_declarations(fixture_bytes("unclosed-tag.xml"))
        assert exc_info.value.line is not None


class TestResolveSchemaVersion:
    """Tests for resolve_schema_version."""

    def test_only_bom_namespace(self):
        assert resolve_schema_version([NamespaceDeclaration(uri=NS_BOM_12)]) is SchemaVersion.VERSION_12

    def test_unrelated_namespaces_are_skipped(self):
        declarations = [
            NamespaceDeclaration(uri=DSIG, prefix="ds"),
            NamespaceDeclaration(uri=NS_BOM_11),
        ]
        assert resolve_schema_version(declarations) is SchemaVersion.VERSION_11

    def test_first_match_wins(self):
        declarations = [
            NamespaceDeclaration(uri=NS_BOM_11, prefix="old"),
            NamespaceDeclaration(uri=NS_BOM_12),
        ]
        assert resolve_schema_version(declarations) is SchemaVersion.VERSION_11

    def test_unknown(self):
        assert resolve_schema_version([NamespaceDeclaration(uri="urn:example:x")]) is None
        assert resolve_schema_version([]) is None

    def test_accepts_any_iterable(self):
        declarations = (d for d in [NamespaceDeclaration(uri=NS_BOM_12)])
        assert resolve_schema_version(declarations) is SchemaVersion.VERSION_12
