"""Declarative record schemas.

A schema is an explicit table of field name -> rule declarations, bound to a
record type (a class) or a schema name (for mapping records) at startup.

Usage:
    from constraintforge.metadata.schema import RecordSchema, SchemaRegistry, size

    schema = (
        RecordSchema("SampleForm")
        .field("name", size(min=1, max=20))
        .field("age", minimum(0), maximum(150))
    )
    SchemaRegistry.register(SampleForm, schema)

or, on a class:

    @constrained(name=[size(min=1, max=20)], color=[one_of(Color)])
    @dataclass
    class SampleForm:
        ...
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable

from constraintforge.validation.evaluators.enum_membership import ENUM_MEMBERSHIP
from constraintforge.validation.types import ConfigurationError, RuleDeclaration

logger = logging.getLogger(__name__)

# A schema is keyed by the record class, or by name for mapping records
SchemaKey = Any


# =============================================================================
# Declaration helpers
# =============================================================================


def _declare(kind: str, message: str | None, **params: Any) -> RuleDeclaration:
    return RuleDeclaration(
        kind=kind,
        params={k: v for k, v in params.items() if v is not None},
        message=message,
    )


def size(min: int | None = None, max: int | None = None, message: str | None = None) -> RuleDeclaration:
    """Length of text or a collection within [min, max]."""
    return _declare("size", message, min=min, max=max)


def value_range(min: Any, max: Any, message: str | None = None) -> RuleDeclaration:
    """Numeric value within [min, max]."""
    return _declare("range", message, min=min, max=max)


def minimum(value: Any, message: str | None = None) -> RuleDeclaration:
    return _declare("min", message, value=value)


def maximum(value: Any, message: str | None = None) -> RuleDeclaration:
    return _declare("max", message, value=value)


def pattern(
    regexp: str,
    flags: Iterable[str] | None = None,
    message: str | None = None,
) -> RuleDeclaration:
    """Whole value matches the regular expression."""
    return _declare("pattern", message, regexp=regexp, flags=list(flags) if flags else None)


def one_of(
    allowed: type[Enum] | Iterable[str],
    normalize: str | None = None,
    message: str | None = None,
) -> RuleDeclaration:
    """Value names a member of an Enum class or of a list of names."""
    if not (isinstance(allowed, type) and issubclass(allowed, Enum)):
        allowed = list(allowed)
    return _declare(ENUM_MEMBERSHIP, message, allowedValues=allowed, normalize=normalize)


# =============================================================================
# Record schema
# =============================================================================


@dataclass(frozen=True)
class FieldSchema:
    """Declared rules for one field."""

    name: str
    rules: tuple[RuleDeclaration, ...] = ()
    nested: SchemaKey = None


@dataclass
class RecordSchema:
    """Builder for a record's field -> rules table.

    Fields keep the order they are declared in.
    """

    name: str
    fields: list[FieldSchema] = field(default_factory=list)

    def field(
        self,
        name: str,
        *rules: RuleDeclaration,
        nested: SchemaKey = None,
    ) -> "RecordSchema":
        """Declare a field; returns self for chaining.

        Raises:
            ConfigurationError: If the field is declared twice
        """
        if any(f.name == name for f in self.fields):
            raise ConfigurationError(
                f"Field '{name}' is declared twice in schema '{self.name}'"
            )
        self.fields.append(FieldSchema(name=name, rules=tuple(rules), nested=nested))
        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordSchema":
        """Create RecordSchema from a YAML/JSON dict."""
        schema = cls(name=data["record"])
        for field_data in data.get("fields") or []:
            schema.field(
                field_data["name"],
                *(RuleDeclaration.from_dict(r) for r in field_data.get("rules") or []),
                nested=field_data.get("nested"),
            )
        return schema


# =============================================================================
# Schema registry
# =============================================================================


def schema_key_name(key: SchemaKey) -> str:
    """Readable name for a schema key."""
    if isinstance(key, type):
        return key.__qualname__
    return str(key)


class SchemaRegistry:
    """Registry binding record types and schema names to RecordSchemas.

    Example:
        SchemaRegistry.register(SampleForm, schema)
        SchemaRegistry.register("Address", address_schema)
    """

    _schemas: dict[SchemaKey, RecordSchema] = {}

    @classmethod
    def register(cls, key: SchemaKey, schema: RecordSchema) -> None:
        """Bind a schema to a record class or name.

        Idempotent for the same schema; binding a different schema to a
        key that is already bound is an error.

        Raises:
            ConfigurationError: If the key is already bound to another schema
        """
        existing = cls._schemas.get(key)
        if existing is not None:
            if existing == schema:
                return
            raise ConfigurationError(
                f"Schema for '{schema_key_name(key)}' is already registered"
            )
        cls._schemas[key] = schema
        logger.debug("Registered schema '%s' (%d fields)", schema_key_name(key), len(schema.fields))

    @classmethod
    def get(cls, key: SchemaKey) -> RecordSchema:
        """Get the schema bound to a key.

        Raises:
            ConfigurationError: If nothing is bound to the key
        """
        if key not in cls._schemas:
            raise ConfigurationError(
                f"No schema is registered for '{schema_key_name(key)}'. "
                "Schemas must be registered at application startup."
            )
        return cls._schemas[key]

    @classmethod
    def key_for(cls, record_type: type) -> SchemaKey:
        """Schema key for a record class: the class itself or its nearest
        registered base class. Returns ``record_type`` when none is registered.
        """
        for candidate in record_type.__mro__:
            if candidate in cls._schemas:
                return candidate
        return record_type

    @classmethod
    def is_registered(cls, key: SchemaKey) -> bool:
        return key in cls._schemas

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered schema names."""
        return sorted(schema_key_name(k) for k in cls._schemas)

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._schemas.clear()


def constrained(**fields: Any) -> Callable[[type], type]:
    """Decorator to declare and register a schema for a record class.

    Each keyword is a field name mapped to a rule declaration or a list of
    them. Use ``nested(...)`` to validate a nested record.

    Usage:
        @constrained(name=[size(min=1, max=20)], address=nested(Address))
        class Person:
            ...
    """

    def decorator(record_class: type) -> type:
        schema = RecordSchema(record_class.__name__)
        for name, declared in fields.items():
            if isinstance(declared, NestedRef):
                schema.field(name, *declared.rules, nested=declared.key)
            elif isinstance(declared, RuleDeclaration):
                schema.field(name, declared)
            else:
                schema.field(name, *declared)
        SchemaRegistry.register(record_class, schema)
        return record_class

    return decorator


@dataclass(frozen=True)
class NestedRef:
    """Marker for a nested record field in ``@constrained``."""

    key: SchemaKey
    rules: tuple[RuleDeclaration, ...] = ()


def nested(key: SchemaKey, *rules: RuleDeclaration) -> NestedRef:
    """Validate a field's value against another registered schema."""
    return NestedRef(key=key, rules=rules)
