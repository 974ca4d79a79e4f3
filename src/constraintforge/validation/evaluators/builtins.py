"""Built-in rule evaluators.

These evaluators are registered by ``register_builtin_rules()`` and enforce:
- size: Length bounds for text and sized collections
- range: Inclusive numeric bounds
- min / max: Single inclusive numeric bound
- pattern: Full regular expression match
"""

import re
from collections.abc import Sized
from decimal import Decimal, InvalidOperation
from typing import Any

from constraintforge.validation.registry import BaseEvaluator, RuleRegistry
from constraintforge.validation.types import ConfigurationError

# Upper bound used when a size rule declares no max
SIZE_UNBOUNDED = 2147483647

PATTERN_FLAGS = {
    "IGNORECASE": re.IGNORECASE,
    "MULTILINE": re.MULTILINE,
    "DOTALL": re.DOTALL,
}


# =============================================================================
# Parameter helpers
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _number_param(params: dict[str, Any], name: str, default: Any = None) -> Any:
    value = params.get(name, default)
    if value is None:
        raise ConfigurationError(f"missing required parameter '{name}'")
    if not _is_number(value) or value != value:
        raise ConfigurationError(f"parameter '{name}' must be a number, got {value!r}")
    return value


def _int_param(params: dict[str, Any], name: str, default: int) -> int:
    value = params.get(name, default)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigurationError(f"parameter '{name}' must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"parameter '{name}' must not be negative, got {value}")
    return value


def _check_order(low: Any, high: Any) -> None:
    if low > high:
        raise ConfigurationError(f"min ({low}) must not be greater than max ({high})")


def as_number(value: Any) -> Any:
    """Coerce a value to a comparable number, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = value
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if number != number:  # NaN
        return None
    return number


# =============================================================================
# Size
# =============================================================================


class SizeEvaluator(BaseEvaluator):
    """Valid iff ``min <= len(value) <= max``, inclusive both ends.

    Params:
        min: Minimum length (default 0)
        max: Maximum length (default unbounded)
    """

    message_template = "size must be between {min} and {max}"

    def initialize(self, params: dict[str, Any]) -> None:
        self.min = _int_param(params, "min", 0)
        self.max = _int_param(params, "max", SIZE_UNBOUNDED)
        _check_order(self.min, self.max)
        self.params = {**params, "min": self.min, "max": self.max}

    def is_valid(self, value: Any) -> bool:
        if not isinstance(value, Sized):
            return False
        return self.min <= len(value) <= self.max


# =============================================================================
# Numeric bounds
# =============================================================================


class RangeEvaluator(BaseEvaluator):
    """Valid iff ``min <= value <= max``, inclusive.

    Params:
        min: Lower bound
        max: Upper bound
    """

    message_template = "must be between {min} and {max}"

    def initialize(self, params: dict[str, Any]) -> None:
        self.min = _number_param(params, "min")
        self.max = _number_param(params, "max")
        _check_order(self.min, self.max)
        self.params = dict(params)

    def is_valid(self, value: Any) -> bool:
        number = as_number(value)
        if number is None:
            return False
        return self.min <= number <= self.max


class MinEvaluator(BaseEvaluator):
    """Valid iff ``value >= params['value']``."""

    message_template = "must be greater than or equal to {value}"

    def initialize(self, params: dict[str, Any]) -> None:
        self.bound = _number_param(params, "value")
        self.params = dict(params)

    def is_valid(self, value: Any) -> bool:
        number = as_number(value)
        return number is not None and number >= self.bound


class MaxEvaluator(BaseEvaluator):
    """Valid iff ``value <= params['value']``."""

    message_template = "must be less than or equal to {value}"

    def initialize(self, params: dict[str, Any]) -> None:
        self.bound = _number_param(params, "value")
        self.params = dict(params)

    def is_valid(self, value: Any) -> bool:
        number = as_number(value)
        return number is not None and number <= self.bound


# =============================================================================
# Pattern
# =============================================================================


class PatternEvaluator(BaseEvaluator):
    """Valid iff the whole text value matches the regular expression.

    Params:
        regexp: The regular expression, compiled once at initialization
        flags: Optional list of flag names (IGNORECASE, MULTILINE, DOTALL)
    """

    message_template = 'must match "{regexp}"'

    def initialize(self, params: dict[str, Any]) -> None:
        regexp = params.get("regexp")
        if not isinstance(regexp, str):
            raise ConfigurationError(f"parameter 'regexp' must be a string, got {regexp!r}")

        flags = 0
        for name in params.get("flags") or []:
            if name not in PATTERN_FLAGS:
                raise ConfigurationError(
                    f"unknown pattern flag {name!r}; expected one of "
                    + ", ".join(sorted(PATTERN_FLAGS))
                )
            flags |= PATTERN_FLAGS[name]

        try:
            self.compiled = re.compile(regexp, flags)
        except re.error as exc:
            raise ConfigurationError(f"invalid regular expression {regexp!r}: {exc}") from exc
        self.params = dict(params)

    def is_valid(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        return self.compiled.fullmatch(value) is not None


# =============================================================================
# Registration
# =============================================================================


BUILTIN_RULES: dict[str, type[BaseEvaluator]] = {
    "size": SizeEvaluator,
    "range": RangeEvaluator,
    "min": MinEvaluator,
    "max": MaxEvaluator,
    "pattern": PatternEvaluator,
}


def register_builtin_rules() -> None:
    """Register the built-in rule kinds with the RuleRegistry.

    Call at application startup.
    """
    for kind, evaluator_class in BUILTIN_RULES.items():
        RuleRegistry.register(kind, evaluator_class)
