"""Core types for the constraintforge validation system.

This module defines the foundational types shared by every layer:
- Declarations: RuleDeclaration, FieldDescriptor, TypeMetadata
- Results: Violation, ValidationResult
- Errors: ConfigurationError (setup time), RecordValidationError (caller side)
- The RuleEvaluator protocol implemented by built-in and plugin rules
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Protocol


# =============================================================================
# Errors
# =============================================================================


class ConstraintForgeError(Exception):
    """Base class for all constraintforge errors."""


class ConfigurationError(ConstraintForgeError):
    """A fatal setup-time failure.

    Raised while registering rules or building metadata: unregistered rule
    kinds, malformed parameters, bad regular expressions, unresolved message
    template tokens. Never returned as a Violation.
    """


class RecordValidationError(ConstraintForgeError):
    """Raised by ValidationResult.raise_if_invalid() for callers that want exceptions."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        summary = "; ".join(f"{v.property_path}: {v.message}" for v in result)
        super().__init__(f"{len(result)} constraint violation(s): {summary}")


# =============================================================================
# Declarations
# =============================================================================


@dataclass(frozen=True)
class RuleDeclaration:
    """A parameterized rule attached to exactly one field.

    Attributes:
        kind: Registry identifier of the rule ("size", "range", "pattern", ...)
        params: Parameter name -> value, read-only once constructed
        message: Optional template override; registry default is used when None
    """

    kind: str
    params: Mapping[str, Any] = field(default_factory=dict)
    message: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __hash__(self) -> int:
        return hash((self.kind, self.message, tuple(sorted(self.params))))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleDeclaration":
        """Create RuleDeclaration from a YAML/JSON dict."""
        return cls(
            kind=data["kind"],
            params=dict(data.get("params") or {}),
            message=data.get("message"),
        )


@dataclass(frozen=True)
class FieldDescriptor:
    """A field and the rules declared on it, in declaration order.

    ``nullable`` is always True: a null value satisfies every rule.
    ``nested`` names the schema used to validate a nested record value.
    """

    name: str
    declared_rules: tuple[RuleDeclaration, ...] = ()
    nullable: bool = True
    nested: Any = None


@dataclass(frozen=True)
class TypeMetadata:
    """Extracted metadata for one record type.

    Built once per type by the MetadataExtractor and never mutated.
    ``evaluators`` holds one initialized evaluator per declared rule,
    aligned with ``field_descriptors``; it is excluded from equality so a
    rebuild from the same schema compares equal.
    """

    type_name: str
    field_descriptors: tuple[FieldDescriptor, ...]
    evaluators: tuple[tuple["RuleEvaluator", ...], ...] = field(
        default=(), compare=False, repr=False
    )
    templates: tuple[tuple[str, ...], ...] = field(
        default=(), compare=False, repr=False
    )

    def field_names(self) -> list[str]:
        return [d.name for d in self.field_descriptors]


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class Violation:
    """One failed rule evaluation.

    Attributes:
        property_path: Field name, dot-joined for nested records
        message: Fully rendered message
        code: The rule kind that failed
        invalid_value: The offending value
    """

    property_path: str
    message: str
    code: str = field(default="", compare=False)
    invalid_value: Any = field(default=None, compare=False, hash=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "propertyPath": self.property_path,
            "message": self.message,
            "code": self.code,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating one record.

    Violations keep field declaration order, then rule declaration order.
    An empty result means the record is valid.
    """

    violations: tuple[Violation, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    def __len__(self) -> int:
        return len(self.violations)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self.violations)

    def as_set(self) -> frozenset[Violation]:
        return frozenset(self.violations)

    def by_field(self) -> dict[str, list[str]]:
        """Group rendered messages by property path."""
        grouped: dict[str, list[str]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.property_path, []).append(violation.message)
        return grouped

    def raise_if_invalid(self) -> None:
        if self.violations:
            raise RecordValidationError(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": [v.to_dict() for v in self.violations],
        }


# =============================================================================
# Evaluator contract
# =============================================================================


class RuleEvaluator(Protocol):
    """Protocol that every rule kind implements.

    Evaluators are configured once from declaration parameters and are
    then read-only, so one instance may be shared across threads.

    An evaluator may also define ``message_params() -> dict`` to expose
    parameters with defaults filled in; without it, templates render
    against the declaration parameters as written.
    """

    def initialize(self, params: dict[str, Any]) -> None:
        """Read and check declaration parameters.

        Raises:
            ConfigurationError: If parameters are missing or malformed
        """
        ...

    def is_valid(self, value: Any) -> bool:
        """Return True if the non-null value satisfies the rule."""
        ...

    def default_message_template(self) -> str:
        """Template used when the declaration carries no message override."""
        ...
