"""Tests for schema declarations, RecordSchema and SchemaRegistry."""

from dataclasses import dataclass

import pytest

from constraintforge.metadata.schema import (
    FieldSchema,
    RecordSchema,
    SchemaRegistry,
    constrained,
    maximum,
    minimum,
    nested,
    one_of,
    pattern,
    schema_key_name,
    size,
    value_range,
)
from constraintforge.validation.types import ConfigurationError, RuleDeclaration

from sample_records import Color


class TestDeclarationHelpers:
    def test_size_drops_unset_bounds(self):
        assert size(max=5) == RuleDeclaration("size", {"max": 5})

    def test_numeric_helpers(self):
        assert value_range(0, 10) == RuleDeclaration("range", {"min": 0, "max": 10})
        assert minimum(1) == RuleDeclaration("min", {"value": 1})
        assert maximum(2, message="too big") == RuleDeclaration("max", {"value": 2}, "too big")

    def test_pattern_flags(self):
        declaration = pattern("a+", flags=("IGNORECASE",))
        assert declaration.params == {"regexp": "a+", "flags": ["IGNORECASE"]}

    def test_one_of_enum_and_names(self):
        assert one_of(Color).params == {"allowedValues": Color}
        assert one_of(("S", "M"), normalize="none").params == {
            "allowedValues": ["S", "M"],
            "normalize": "none",
        }

    def test_declarations_are_hashable(self):
        assert len({size(max=5), size(max=5), size(max=6)}) == 2

    def test_params_are_read_only(self):
        params = {"max": 5}
        declaration = RuleDeclaration("size", params)

        params["max"] = 50

        assert declaration.params == {"max": 5}
        with pytest.raises(TypeError):
            declaration.params["max"] = 1

    def test_from_dict(self):
        declaration = RuleDeclaration.from_dict(
            {"kind": "pattern", "params": {"regexp": "x"}, "message": "bad"}
        )
        assert declaration == RuleDeclaration("pattern", {"regexp": "x"}, "bad")


class TestRecordSchema:
    def test_builder_keeps_order(self):
        schema = RecordSchema("Form").field("b", size(max=1)).field("a")

        assert [f.name for f in schema.fields] == ["b", "a"]
        assert schema.fields[1] == FieldSchema(name="a")

    def test_duplicate_field(self):
        schema = RecordSchema("Form").field("a")

        with pytest.raises(ConfigurationError, match="declared twice"):
            schema.field("a")

    def test_from_dict(self):
        schema = RecordSchema.from_dict(
            {
                "record": "Person",
                "fields": [
                    {"name": "name", "rules": [{"kind": "size", "params": {"min": 1}}]},
                    {"name": "address", "nested": "Address"},
                ],
            }
        )

        assert schema == (
            RecordSchema("Person")
            .field("name", RuleDeclaration("size", {"min": 1}))
            .field("address", nested="Address")
        )


class TestSchemaRegistry:
    def test_register_and_get(self):
        schema = RecordSchema("Form").field("a", size(max=1))
        SchemaRegistry.register("Form", schema)

        assert SchemaRegistry.get("Form") is schema
        assert SchemaRegistry.list_registered() == ["Form"]

    def test_reregistering_equal_schema_is_a_no_op(self):
        SchemaRegistry.register("Form", RecordSchema("Form").field("a"))
        SchemaRegistry.register("Form", RecordSchema("Form").field("a"))

    def test_conflicting_schema(self):
        SchemaRegistry.register("Form", RecordSchema("Form").field("a"))

        with pytest.raises(ConfigurationError, match="already registered"):
            SchemaRegistry.register("Form", RecordSchema("Form").field("b"))

    def test_missing(self):
        with pytest.raises(ConfigurationError):
            SchemaRegistry.get("Missing")

    def test_key_for_walks_base_classes(self):
        class Base:
            pass

        class Child(Base):
            pass

        SchemaRegistry.register(Base, RecordSchema("Base"))

        assert SchemaRegistry.key_for(Child) is Base
        assert SchemaRegistry.key_for(dict) is dict

    def test_key_names(self):
        class Local:
            pass

        assert schema_key_name("Form") == "Form"
        assert schema_key_name(Local).endswith("Local")


class TestConstrainedDecorator:
    def test_registers_class_schema(self):
        @constrained(name=size(min=1), tags=[size(max=3), pattern("x")])
        @dataclass
        class Item:
            name: str = ""
            tags: str = ""

        schema = SchemaRegistry.get(Item)

        assert schema.name == "Item"
        assert [len(f.rules) for f in schema.fields] == [1, 2]

    def test_nested_reference(self):
        @constrained(address=nested("Address", size(max=2)))
        class Person:
            pass

        (address,) = SchemaRegistry.get(Person).fields
        assert address.nested == "Address"
        assert address.rules == (size(max=2),)
