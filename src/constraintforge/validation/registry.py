"""Rule registry for constraintforge.

Provides registration and lookup for:
- Built-in rules (size, range, min, max, pattern)
- Plugin rules (enumMembership, application-specific, explicitly registered)
"""

import logging
from typing import Any, Callable

from constraintforge.validation.types import (
    ConfigurationError,
    RuleDeclaration,
    RuleEvaluator,
)

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Registry for rule kinds.

    Rules must be explicitly registered before a schema can reference them.
    This applies to both built-in rules (registered by bootstrap) and plugin
    rules (registered by the application at startup). Once startup is done
    the registry is frozen and further registration is an error.

    Example:
        # Register a plugin rule
        RuleRegistry.register("myapp.isbn", IsbnEvaluator)

        # Later, resolve from a declaration
        evaluator = RuleRegistry.create(RuleDeclaration(kind="myapp.isbn"))
    """

    _evaluators: dict[str, type[RuleEvaluator]] = {}
    _templates: dict[str, str] = {}
    _frozen: bool = False

    @classmethod
    def register(
        cls,
        kind: str,
        evaluator_class: type[RuleEvaluator],
        default_message_template: str | None = None,
    ) -> None:
        """Register an evaluator class by rule kind.

        Idempotent - re-registering the same kind is a no-op.

        Args:
            kind: Unique identifier for the rule (e.g., "size", "myapp.isbn")
            evaluator_class: Class implementing the RuleEvaluator protocol
            default_message_template: Overrides the evaluator's own default template

        Raises:
            ConfigurationError: If the registry is frozen
        """
        if kind in cls._evaluators:
            return  # Already registered, no-op
        if cls._frozen:
            raise ConfigurationError(
                f"Cannot register rule '{kind}': the rule registry is frozen. "
                "Rules must be registered at application startup."
            )
        cls._evaluators[kind] = evaluator_class
        if default_message_template is not None:
            cls._templates[kind] = default_message_template
        logger.debug("Registered rule '%s' -> %s", kind, evaluator_class.__name__)

    @classmethod
    def resolve(cls, kind: str) -> type[RuleEvaluator]:
        """Get a registered evaluator class by rule kind.

        Raises:
            ConfigurationError: If the rule kind is not registered
        """
        if kind not in cls._evaluators:
            raise ConfigurationError(
                f"Rule '{kind}' is not registered. "
                "Available rules: " + ", ".join(cls.list_registered())
            )
        return cls._evaluators[kind]

    @classmethod
    def create(cls, declaration: RuleDeclaration) -> RuleEvaluator:
        """Create an initialized evaluator from a declaration.

        Raises:
            ConfigurationError: If the kind is unknown or its parameters are malformed
        """
        evaluator = cls.resolve(declaration.kind)()
        try:
            evaluator.initialize(dict(declaration.params))
        except ConfigurationError as exc:
            raise ConfigurationError(f"Rule '{declaration.kind}': {exc}") from exc
        return evaluator

    @classmethod
    def default_template(cls, kind: str, evaluator: RuleEvaluator) -> str:
        """Registry-level template if one was given, else the evaluator's own."""
        return cls._templates.get(kind) or evaluator.default_message_template()

    @classmethod
    def is_registered(cls, kind: str) -> bool:
        """Check if a rule kind is registered."""
        return kind in cls._evaluators

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered rule kinds."""
        return sorted(cls._evaluators.keys())

    @classmethod
    def freeze(cls) -> None:
        """Make the registry immutable for the rest of the process."""
        cls._frozen = True

    @classmethod
    def is_frozen(cls) -> bool:
        return cls._frozen

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations and unfreeze. Primarily for testing."""
        cls._evaluators.clear()
        cls._templates.clear()
        cls._frozen = False


class BaseEvaluator:
    """Base class for evaluators with common functionality.

    Subclasses override ``initialize`` and ``is_valid`` and set
    ``message_template``. ``check`` is the evaluator boundary used by the
    engine: whatever ``is_valid`` does, ``check`` returns a bool.
    """

    message_template: str = ""

    def __init__(self) -> None:
        self.params: dict[str, Any] = {}

    def initialize(self, params: dict[str, Any]) -> None:
        """Read declaration parameters. Override in subclasses."""
        self.params = dict(params)

    def is_valid(self, value: Any) -> bool:
        """Evaluate a non-null value. Override in subclasses."""
        raise NotImplementedError("Subclasses must implement is_valid()")

    def default_message_template(self) -> str:
        return self.message_template

    def message_params(self) -> dict[str, Any]:
        return self.params

    def check(self, value: Any) -> bool:
        return evaluate(self, value)


def evaluate(evaluator: RuleEvaluator, value: Any) -> bool:
    """Run an evaluator against a non-null value, converting faults to False.

    Plugin evaluators need not subclass BaseEvaluator; the engine always
    goes through this function so no exception escapes a rule.
    """
    try:
        return bool(evaluator.is_valid(value))
    except Exception:
        logger.debug(
            "%s raised while evaluating %r; treating as invalid",
            type(evaluator).__name__,
            value,
            exc_info=True,
        )
        return False


def message_params(evaluator: RuleEvaluator, declaration: RuleDeclaration) -> dict[str, Any]:
    """Parameters a rule's message template renders against.

    Uses the evaluator's ``message_params()`` when it has one, otherwise
    the declaration parameters as written.
    """
    provider = getattr(evaluator, "message_params", None)
    if provider is None:
        return dict(declaration.params)
    return provider()


def rule(kind: str, default_message_template: str | None = None) -> Callable[[type], type]:
    """Decorator to register an evaluator class.

    Usage:
        @rule("myapp.isbn")
        class IsbnEvaluator(BaseEvaluator):
            ...
    """

    def decorator(evaluator_class: type) -> type:
        RuleRegistry.register(kind, evaluator_class, default_message_template)
        return evaluator_class

    return decorator
