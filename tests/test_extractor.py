"""Tests for metadata extraction and caching."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from constraintforge.metadata.extractor import MetadataExtractor
from constraintforge.metadata.schema import (
    RecordSchema,
    SchemaRegistry,
    pattern,
    size,
    value_range,
)
from constraintforge.validation.registry import BaseEvaluator, RuleRegistry
from constraintforge.validation.types import ConfigurationError, FieldDescriptor, RuleDeclaration

from sample_records import SampleForm, register_sample_form


@pytest.fixture
def extractor():
    return MetadataExtractor()


class TestExtract:
    def test_descriptors_follow_declaration_order(self, extractor):
        register_sample_form()

        metadata = extractor.extract(SampleForm)

        assert metadata.type_name == "SampleForm"
        assert metadata.field_names() == ["name", "age", "postal_code", "color"]
        assert [r.kind for r in metadata.field_descriptors[1].declared_rules] == ["min", "max"]

    def test_fields_are_always_nullable(self, extractor):
        register_sample_form()

        assert all(d.nullable for d in extractor.extract(SampleForm).field_descriptors)

    def test_templates_resolve_overrides_and_defaults(self, extractor):
        SchemaRegistry.register(
            "Form",
            RecordSchema("Form")
            .field("a", size(max=3))
            .field("b", size(max=3, message="at most {max} characters")),
        )

        metadata = extractor.extract("Form")

        assert metadata.templates == (
            ("size must be between {min} and {max}",),
            ("at most {max} characters",),
        )

    def test_rebuild_is_equal(self, extractor):
        register_sample_form()

        first = extractor.build(SampleForm)
        second = extractor.build(SampleForm)

        assert first == second
        assert first is not second

    def test_extract_is_cached(self, extractor):
        register_sample_form()

        first = extractor.extract(SampleForm)
        second = extractor.extract(SampleForm)

        assert first is second
        assert extractor.build_count == 1
        assert extractor.is_cached(SampleForm)

    def test_invalidate(self, extractor):
        register_sample_form()
        extractor.extract(SampleForm)

        extractor.invalidate()

        assert not extractor.is_cached(SampleForm)
        assert extractor.build_count == 0

    def test_field_without_rules(self, extractor):
        SchemaRegistry.register("Bare", RecordSchema("Bare").field("note"))

        metadata = extractor.extract("Bare")

        assert metadata.field_descriptors == (FieldDescriptor(name="note"),)


class TestConfigurationErrors:
    def test_unregistered_kind(self, extractor):
        SchemaRegistry.register(
            "Form", RecordSchema("Form").field("isbn", RuleDeclaration("isbn"))
        )

        with pytest.raises(ConfigurationError, match="Form.isbn: Rule 'isbn' is not registered"):
            extractor.extract("Form")

    def test_malformed_regexp(self, extractor):
        SchemaRegistry.register("Form", RecordSchema("Form").field("zip", pattern("([0-9")))

        with pytest.raises(ConfigurationError, match="invalid regular expression"):
            extractor.extract("Form")

    def test_min_greater_than_max(self, extractor):
        SchemaRegistry.register("Form", RecordSchema("Form").field("age", value_range(10, 0)))

        with pytest.raises(ConfigurationError, match="Form.age"):
            extractor.extract("Form")

    def test_unresolved_template_token(self, extractor):
        SchemaRegistry.register(
            "Form",
            RecordSchema("Form").field("name", size(max=5, message="at most {limit}")),
        )

        with pytest.raises(ConfigurationError, match="unknown parameter\\(s\\): limit"):
            extractor.extract("Form")

    @pytest.mark.parametrize("message", ["at most {max-len}", "bad {a.b}", "bad { max }", "bad {"])
    def test_malformed_template_token(self, extractor, message):
        SchemaRegistry.register(
            "Form", RecordSchema("Form").field("name", size(max=2, message=message))
        )

        with pytest.raises(ConfigurationError, match="Form.name"):
            extractor.extract("Form")

    def test_missing_schema(self, extractor):
        with pytest.raises(ConfigurationError, match="No schema is registered for 'Nothing'"):
            extractor.extract("Nothing")

    def test_missing_nested_schema(self, extractor):
        SchemaRegistry.register("Person", RecordSchema("Person").field("address", nested="Address"))

        with pytest.raises(ConfigurationError, match="nested schema 'Address' is not registered"):
            extractor.extract("Person")

    def test_failed_build_is_not_cached(self, extractor):
        SchemaRegistry.register(
            "Form", RecordSchema("Form").field("isbn", RuleDeclaration("isbn"))
        )

        for _ in range(2):
            with pytest.raises(ConfigurationError):
                extractor.extract("Form")

        assert not extractor.is_cached("Form")

    def test_declarations_are_kept_verbatim(self, extractor):
        SchemaRegistry.register("Form", RecordSchema("Form").field("zip", pattern(r"\d+")))

        metadata = extractor.extract("Form")

        assert metadata.field_descriptors[0].declared_rules == (pattern(r"\d+"),)


class TestNestedMetadata:
    def test_bad_nested_schema_fails_parent_extract(self, extractor):
        SchemaRegistry.register("Addr", RecordSchema("Addr").field("zip", pattern("([0-9")))
        SchemaRegistry.register("P", RecordSchema("P").field("addr", nested="Addr"))

        with pytest.raises(ConfigurationError, match="Addr.zip: Rule 'pattern'"):
            extractor.extract("P")

        assert not extractor.is_cached("P")

    def test_nested_schema_is_built_with_parent(self, extractor):
        SchemaRegistry.register("Addr", RecordSchema("Addr").field("zip", pattern(r"\d+")))
        SchemaRegistry.register("P", RecordSchema("P").field("addr", nested="Addr"))

        extractor.extract("P")

        assert extractor.is_cached("Addr")
        assert extractor.build_count == 2

    def test_self_reference_terminates(self, extractor):
        SchemaRegistry.register(
            "Node",
            RecordSchema("Node").field("label", size(max=3)).field("parent", nested="Node"),
        )

        metadata = extractor.extract("Node")

        assert metadata.field_names() == ["label", "parent"]
        assert extractor.build_count == 1

    def test_mutual_reference_terminates(self, extractor):
        SchemaRegistry.register("A", RecordSchema("A").field("b", nested="B"))
        SchemaRegistry.register("B", RecordSchema("B").field("a", nested="A"))

        extractor.extract("A")

        assert extractor.is_cached("A") and extractor.is_cached("B")


class TestPluginInterface:
    def test_minimal_plugin_renders_declaration_params(self, extractor):
        class Isbn:
            def initialize(self, params):
                self.length = params["length"]

            def is_valid(self, value):
                return len(value) == self.length

            def default_message_template(self):
                return "must be an ISBN-{length}"

        RuleRegistry.register("isbn", Isbn)
        SchemaRegistry.register(
            "Book", RecordSchema("Book").field("isbn", RuleDeclaration("isbn", {"length": 13}))
        )

        metadata = extractor.extract("Book")

        assert metadata.templates == (("must be an ISBN-{length}",),)


class TestConcurrentExtract:
    def test_concurrent_first_use_builds_once(self, extractor):
        started = threading.Event()

        class Slow(BaseEvaluator):
            message_template = "slow"

            def initialize(self, params):
                started.set()
                time.sleep(0.05)
                super().initialize(params)

            def is_valid(self, value):
                return True

        RuleRegistry.register("slow", Slow)
        SchemaRegistry.register(
            "Form",
            RecordSchema("Form").field("a", RuleDeclaration("slow")).field("b", size(max=1)),
        )
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            return extractor.extract("Form")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: worker(), range(8)))

        assert started.is_set()
        assert extractor.build_count == 1
        assert all(r is results[0] for r in results)
        assert all(r == results[0] for r in results)
