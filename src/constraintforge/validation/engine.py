"""Validation engine.

Evaluates every declared rule against every field of a record and
collects the failures as Violations:

1. Look up TypeMetadata for the record's schema (cached)
2. For each field in declaration order, read its value
3. Null values satisfy every rule; no evaluator runs
4. Otherwise run each rule in declaration order; each failure is one Violation
5. Nested records are validated recursively with dot-joined paths

The engine never mutates the record and never raises for metadata that
built successfully.
"""

from collections.abc import Mapping
from typing import Any

from constraintforge.metadata.extractor import MetadataExtractor
from constraintforge.metadata.schema import SchemaKey, SchemaRegistry
from constraintforge.validation.registry import evaluate, message_params
from constraintforge.validation.templating import MessageInterpolator
from constraintforge.validation.types import (
    FieldDescriptor,
    TypeMetadata,
    ValidationResult,
    Violation,
)


def read_field(record: Any, name: str) -> Any:
    """Read a field from a mapping or an object; absent fields read as None."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


class ValidationEngine:
    """Validates records against their extracted metadata.

    Stateless per call; one engine may be shared across threads.
    """

    def __init__(
        self,
        extractor: MetadataExtractor | None = None,
        interpolator: MessageInterpolator | None = None,
    ):
        self.extractor = extractor or MetadataExtractor()
        self.interpolator = interpolator or self.extractor.interpolator

    def validate(self, record: Any, schema: SchemaKey = None) -> ValidationResult:
        """Validate a record.

        Args:
            record: Object or mapping to validate
            schema: Schema key; defaults to the record's class, or the
                nearest base class with a registered schema

        Returns:
            ValidationResult with every violation (empty when valid)

        Raises:
            ConfigurationError: On first use of a type whose schema is malformed
        """
        key = schema if schema is not None else SchemaRegistry.key_for(type(record))
        metadata = self.extractor.extract(key)
        violations: list[Violation] = []
        self._validate_record(record, metadata, "", violations)
        return ValidationResult(violations=tuple(violations))

    def _validate_record(
        self,
        record: Any,
        metadata: TypeMetadata,
        prefix: str,
        violations: list[Violation],
    ) -> None:
        for index, descriptor in enumerate(metadata.field_descriptors):
            value = read_field(record, descriptor.name)
            if value is None:
                continue

            path = prefix + descriptor.name
            rules = zip(
                descriptor.declared_rules,
                metadata.evaluators[index],
                metadata.templates[index],
            )
            for declaration, evaluator, template in rules:
                if evaluate(evaluator, value):
                    continue
                violations.append(
                    Violation(
                        property_path=path,
                        message=self.interpolator.interpolate(
                            template, message_params(evaluator, declaration)
                        ),
                        code=declaration.kind,
                        invalid_value=value,
                    )
                )

            if descriptor.nested is not None:
                self._validate_nested(value, descriptor, path, violations)

    def _validate_nested(
        self,
        value: Any,
        descriptor: FieldDescriptor,
        path: str,
        violations: list[Violation],
    ) -> None:
        nested_metadata = self.extractor.extract(descriptor.nested)
        if isinstance(value, (list, tuple)):
            for position, item in enumerate(value):
                if item is not None:
                    self._validate_record(
                        item, nested_metadata, f"{path}[{position}].", violations
                    )
        else:
            self._validate_record(value, nested_metadata, f"{path}.", violations)


_default_engine = ValidationEngine()


def default_engine() -> ValidationEngine:
    """The process-wide engine used by ``validate()``."""
    return _default_engine


def validate(record: Any, schema: SchemaKey = None) -> ValidationResult:
    """Validate a record with the process-wide engine."""
    return _default_engine.validate(record, schema)
