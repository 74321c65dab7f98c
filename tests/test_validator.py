"""Tests for schema validation and the compiled-schema cache."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from safebom._internal.io.schemas import load_schema_bytes, schema_resource_name
from safebom.codes import DiagnosticCode, Severity
from safebom.errors import SchemaResourceError
from safebom.kernel.validator import DEFAULT_SCHEMA_CACHE, CompiledSchema, SchemaCache, SchemaValidator
from safebom.kernel.versions import VERSION_LATEST, SchemaVersion


@pytest.fixture
def validator():
    return SchemaValidator(SchemaCache())


class TestValidDocuments:
    """Conforming documents produce no diagnostics."""

    @pytest.mark.parametrize(
        "fixture,version",
        [
            ("bom-1.0.xml", SchemaVersion.VERSION_10),
            ("bom-1.1.xml", SchemaVersion.VERSION_11),
            ("bom-1.2.xml", SchemaVersion.VERSION_12),
            ("signed.xml", SchemaVersion.VERSION_12),
        ],
    )
    def test_fixture_conforms(self, validator, fixture_bytes, fixture, version):
        assert validator.validate(fixture_bytes(fixture), version) == []
        assert validator.is_valid(fixture_bytes(fixture), version)

    def test_none_means_latest(self, validator, fixture_bytes):
        assert validator.validate(fixture_bytes("bom-1.2.xml")) == []
        assert VERSION_LATEST is SchemaVersion.VERSION_12


class TestDiagnostics:
    """Invalid documents produce diagnostics instead of exceptions."""

    def test_all_violations_are_reported(self, validator, fixture_bytes):
        diagnostics = validator.validate(fixture_bytes("schema-violations.xml"), SchemaVersion.VERSION_12)

        assert len(diagnostics) >= 2
        assert all(d.code is DiagnosticCode.SCHEMA_VIOLATION for d in diagnostics)
        assert all(d.severity is Severity.ERROR for d in diagnostics)
        lines = {d.line for d in diagnostics}
        assert 4 in lines  # component missing <version>
        assert 11 in lines  # malformed hash value
        assert not validator.is_valid(fixture_bytes("schema-violations.xml"), SchemaVersion.VERSION_12)

    def test_diagnostic_carries_libxml2_type(self, validator, fixture_bytes):
        diagnostic = validator.validate(fixture_bytes("schema-violations.xml"))[0]
        assert diagnostic.error_type.startswith("SCHEMAV_")
        assert diagnostic.message
        assert str(diagnostic).startswith("error: 4:")

    def test_malformed_document_is_fatal(self, validator, fixture_bytes):
        diagnostics = validator.validate(fixture_bytes("unclosed-tag.xml"))

        assert diagnostics
        assert all(d.severity is Severity.FATAL for d in diagnostics)
        assert all(d.code is DiagnosticCode.NOT_WELL_FORMED for d in diagnostics)
        assert diagnostics[0].line is not None
        assert diagnostics[0].cause is not None

    def test_cause_is_not_serialized(self, validator, fixture_bytes):
        diagnostic = validator.validate(fixture_bytes("unclosed-tag.xml"))[0]
        assert "cause" not in diagnostic.model_dump()

    def test_empty_document_is_fatal(self, validator):
        diagnostics = validator.validate(b"")
        assert diagnostics
        assert diagnostics[0].severity is Severity.FATAL

    def test_document_without_namespace_fails_against_latest(self, validator, fixture_bytes):
        diagnostics = validator.validate(fixture_bytes("no-namespace.xml"))
        assert diagnostics
        assert all(d.severity is not Severity.FATAL for d in diagnostics)

    @pytest.mark.parametrize(
        "fixture,version",
        [
            ("bom-1.0.xml", SchemaVersion.VERSION_12),
            ("bom-1.2.xml", SchemaVersion.VERSION_10),
            ("bom-1.2.xml", SchemaVersion.VERSION_11),
        ],
    )
    def test_version_mismatch(self, validator, fixture_bytes, fixture, version):
        assert validator.validate(fixture_bytes(fixture), version)

    def test_version_1_0_requires_modified(self, validator):
        data = (
            b'<bom xmlns="http://cyclonedx.org/schema/bom/1.0" version="1"><components>'
            b'<component type="library"><name>x</name><version>1</version></component>'
            b"</components></bom>"
        )
        assert validator.validate(data, SchemaVersion.VERSION_10)
        assert validator.validate(data.replace(b"1.0", b"1.1"), SchemaVersion.VERSION_11) == []

    def test_entities_are_not_resolved_during_validation(self, validator, fixture_bytes):
        diagnostics = validator.validate(fixture_bytes("external-entity.xml"))
        assert all("root:" not in d.message for d in diagnostics)

    def test_unexpanded_entity_reference_aborts_as_a_diagnostic(self, validator):
        data = (
            b'<!DOCTYPE bom [<!ENTITY e "v">]>'
            b'<bom xmlns="http://cyclonedx.org/schema/bom/1.2" version="1"><components>'
            b'<component type="library"><name>a</name><version>&e;</version></component>'
            b"</components></bom>"
        )
        diagnostics = validator.validate(data)

        assert diagnostics[0].severity is Severity.FATAL
        assert diagnostics[0].code is DiagnosticCode.VALIDATION_ABORTED
        assert diagnostics[0].cause is not None
        assert not validator.is_valid(data)

    def test_external_entity_fixture_is_reported_not_raised(self, validator, fixture_bytes):
        diagnostics = validator.validate(fixture_bytes("external-entity.xml"))
        assert [d.code for d in diagnostics[:1]] == [DiagnosticCode.VALIDATION_ABORTED]


class TestSchemaCache:
    """Each version is compiled once and shared."""

    def test_compiles_once(self):
        calls = []

        def loader(version):
            calls.append(version)
            return load_schema_bytes(version)

        cache = SchemaCache(loader=loader)
        first = cache.get(SchemaVersion.VERSION_12)
        second = cache.get(SchemaVersion.VERSION_12)

        assert isinstance(first, CompiledSchema)
        assert first is second
        assert calls == [SchemaVersion.VERSION_12]
        assert SchemaVersion.VERSION_12 in cache
        assert SchemaVersion.VERSION_10 not in cache

    def test_clear(self):
        cache = SchemaCache()
        cache.get(SchemaVersion.VERSION_10)
        cache.clear()
        assert SchemaVersion.VERSION_10 not in cache

    def test_concurrent_first_use_compiles_once(self):
        calls = []
        calls_lock = threading.Lock()
        barrier = threading.Barrier(8)

        def loader(version):
            with calls_lock:
                calls.append(version)
            return load_schema_bytes(version)

        cache = SchemaCache(loader=loader)

        def get(_):
            barrier.wait()
            return cache.get(SchemaVersion.VERSION_11)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(get, range(8)))

        assert calls == [SchemaVersion.VERSION_11]
        assert all(result is results[0] for result in results)

    def test_concurrent_validation_is_consistent(self, fixture_bytes):
        validator = SchemaValidator(SchemaCache())
        valid = fixture_bytes("bom-1.2.xml")
        invalid = fixture_bytes("schema-violations.xml")
        expected_invalid = validator.validate(invalid)

        def run(i):
            if i % 2:
                return validator.validate(invalid) == expected_invalid
            return validator.validate(valid) == []

        with ThreadPoolExecutor(max_workers=8) as pool:
            assert all(pool.map(run, range(64)))

    def test_default_cache_is_shared(self):
        assert SchemaValidator()._cache is DEFAULT_SCHEMA_CACHE


class TestSchemaResources:
    """Broken installations raise SchemaResourceError, an OSError."""

    def test_packaged_resources_exist_for_every_version(self):
        for version in SchemaVersion:
            assert load_schema_bytes(version).lstrip().startswith(b"<?xml")

    def test_resource_name(self):
        assert schema_resource_name(SchemaVersion.VERSION_11) == "bom-1.1.xsd"

    def test_missing_resource(self, tmp_path, fixture_bytes):
        validator = SchemaValidator(SchemaCache(schema_dir=tmp_path))
        with pytest.raises(SchemaResourceError) as exc_info:
            validator.validate(fixture_bytes("bom-1.2.xml"))
        assert isinstance(exc_info.value, OSError)

    def test_uncompilable_resource(self, tmp_path, fixture_bytes):
        (tmp_path / "bom-1.2.xsd").write_text("<xs:schema", encoding="utf-8")
        validator = SchemaValidator(SchemaCache(schema_dir=tmp_path))
        with pytest.raises(SchemaResourceError):
            validator.validate(fixture_bytes("bom-1.2.xml"))

    def test_schema_dir_replaces_packaged_resources(self, tmp_path, fixture_bytes):
        (tmp_path / "bom-1.2.xsd").write_bytes(load_schema_bytes(SchemaVersion.VERSION_12))
        validator = SchemaValidator(SchemaCache(schema_dir=str(tmp_path)))
        assert validator.validate(fixture_bytes("bom-1.2.xml")) == []

    def test_schema_errors_raise_even_for_malformed_documents(self, tmp_path, fixture_bytes):
        validator = SchemaValidator(SchemaCache(schema_dir=tmp_path))
        with pytest.raises(SchemaResourceError):
            validator.validate(fixture_bytes("unclosed-tag.xml"))
