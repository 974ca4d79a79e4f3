"""Metadata extraction for record types.

Turns a registered RecordSchema into TypeMetadata: ordered field
descriptors plus one initialized evaluator and resolved message template
per declared rule. Every configuration problem surfaces here, at first
use, as a ConfigurationError; nothing about field values is inspected.

TypeMetadata is cached per schema key for the life of the process.
"""

import logging
import threading

from constraintforge.metadata.schema import SchemaKey, SchemaRegistry, schema_key_name
from constraintforge.validation.registry import RuleRegistry, message_params
from constraintforge.validation.templating import MessageInterpolator
from constraintforge.validation.types import (
    ConfigurationError,
    FieldDescriptor,
    RuleEvaluator,
    TypeMetadata,
)

logger = logging.getLogger(__name__)


class MetadataExtractor:
    """Builds and caches TypeMetadata.

    Reads are lock-free once a type is cached. The first build of a type
    happens under a lock, so concurrent callers all observe the same
    instance and the build runs once. Nested schemas are built along with
    the record that references them.
    """

    def __init__(self, interpolator: MessageInterpolator | None = None):
        self.interpolator = interpolator or MessageInterpolator()
        self._cache: dict[SchemaKey, TypeMetadata] = {}
        self._lock = threading.Lock()
        self.build_count = 0

    def extract(self, key: SchemaKey) -> TypeMetadata:
        """Get metadata for a record type, building it on first use.

        Args:
            key: Record class or schema name

        Raises:
            ConfigurationError: If the schema is missing or any declaration is malformed
        """
        metadata = self._cache.get(key)
        if metadata is not None:
            return metadata

        with self._lock:
            return self._extract_locked(key, set())

    def _extract_locked(self, key: SchemaKey, building: set) -> TypeMetadata:
        # Nested schemas are built before the parent is cached, so a
        # cached TypeMetadata never leads to a ConfigurationError later.
        metadata = self._cache.get(key)
        if metadata is not None:
            return metadata

        metadata = self.build(key)
        building.add(key)
        for descriptor in metadata.field_descriptors:
            if descriptor.nested is None or descriptor.nested in building:
                continue
            if not SchemaRegistry.is_registered(descriptor.nested):
                raise ConfigurationError(
                    f"{metadata.type_name}.{descriptor.name}: nested schema "
                    f"'{schema_key_name(descriptor.nested)}' is not registered"
                )
            self._extract_locked(descriptor.nested, building)

        self._cache[key] = metadata
        return metadata

    def build(self, key: SchemaKey) -> TypeMetadata:
        """Build metadata for a key without touching the cache."""
        schema = SchemaRegistry.get(key)
        type_name = schema_key_name(key)

        descriptors: list[FieldDescriptor] = []
        evaluators: list[tuple[RuleEvaluator, ...]] = []
        templates: list[tuple[str, ...]] = []

        for field_schema in schema.fields:
            field_evaluators: list[RuleEvaluator] = []
            field_templates: list[str] = []

            for declaration in field_schema.rules:
                try:
                    evaluator = RuleRegistry.create(declaration)
                    template = declaration.message or RuleRegistry.default_template(
                        declaration.kind, evaluator
                    )
                    self.interpolator.check(template, message_params(evaluator, declaration))
                except ConfigurationError as exc:
                    raise ConfigurationError(
                        f"{type_name}.{field_schema.name}: {exc}"
                    ) from exc
                field_evaluators.append(evaluator)
                field_templates.append(template)

            descriptors.append(
                FieldDescriptor(
                    name=field_schema.name,
                    declared_rules=field_schema.rules,
                    nested=field_schema.nested,
                )
            )
            evaluators.append(tuple(field_evaluators))
            templates.append(tuple(field_templates))

        self.build_count += 1
        logger.debug(
            "Built metadata for '%s': %d fields, %d rules",
            type_name,
            len(descriptors),
            sum(len(d.declared_rules) for d in descriptors),
        )
        return TypeMetadata(
            type_name=type_name,
            field_descriptors=tuple(descriptors),
            evaluators=tuple(evaluators),
            templates=tuple(templates),
        )

    def is_cached(self, key: SchemaKey) -> bool:
        return key in self._cache

    def invalidate(self) -> None:
        """Drop all cached metadata. Primarily for testing."""
        with self._lock:
            self._cache.clear()
            self.build_count = 0
