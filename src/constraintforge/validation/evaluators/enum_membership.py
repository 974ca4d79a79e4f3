"""Enum-membership rule plugin.

Checks that a text value names one of an allowed set. The value and the
allowed names are case-normalized alike, and a match reports the allowed
name in its canonical casing. Registered alongside the built-ins under
the kind ``enumMembership``.

Params:
    allowedValues: Non-empty list of names, or an ``enum.Enum`` subclass
    normalize: "upper" (default), "lower" or "none"
"""

from enum import Enum
from typing import Any, Callable

from constraintforge.validation.registry import BaseEvaluator, RuleRegistry
from constraintforge.validation.types import ConfigurationError

ENUM_MEMBERSHIP = "enumMembership"

NORMALIZERS: dict[str, Callable[[str], str]] = {
    "upper": str.upper,
    "lower": str.lower,
    "none": lambda value: value,
}


def allowed_names(allowed: Any) -> tuple[str, ...]:
    """Resolve the allowedValues parameter to a tuple of names.

    Raises:
        ConfigurationError: If the parameter is missing, empty or not text
    """
    if isinstance(allowed, type) and issubclass(allowed, Enum):
        names = tuple(member.name for member in allowed)
    elif isinstance(allowed, (list, tuple, set, frozenset)):
        names = tuple(allowed)
    else:
        raise ConfigurationError(
            f"parameter 'allowedValues' must be a list of names or an Enum class, got {allowed!r}"
        )
    if not names:
        raise ConfigurationError("parameter 'allowedValues' must not be empty")
    if not all(isinstance(name, str) for name in names):
        raise ConfigurationError("parameter 'allowedValues' must contain only strings")
    return names


class EnumMembershipEvaluator(BaseEvaluator):
    """Valid iff the normalized value is one of the allowed names."""

    message_template = "must be one of {allowedValues}"

    def initialize(self, params: dict[str, Any]) -> None:
        self.names = allowed_names(params.get("allowedValues"))
        mode = params.get("normalize", "upper")
        if mode not in NORMALIZERS:
            raise ConfigurationError(
                f"parameter 'normalize' must be one of {', '.join(NORMALIZERS)}, got {mode!r}"
            )
        self.normalize = NORMALIZERS[mode]
        self.members: dict[str, str] = {}
        for name in self.names:
            key = self.normalize(name)
            if key in self.members and self.members[key] != name:
                raise ConfigurationError(
                    f"parameter 'allowedValues' has {self.members[key]!r} and {name!r}, "
                    f"which are the same under normalize={mode!r}"
                )
            self.members[key] = name
        self.params = {**params, "allowedValues": list(self.names), "normalize": mode}

    def lookup_member(self, value: Any) -> tuple[bool, str | None]:
        """Look up the canonical member for a value.

        Returns:
            (True, canonical name) on a match, (False, None) otherwise
        """
        if isinstance(value, Enum):
            value = value.name
        if not isinstance(value, str):
            return False, None
        canonical = self.members.get(self.normalize(value))
        if canonical is None:
            return False, None
        return True, canonical

    def is_valid(self, value: Any) -> bool:
        found, _ = self.lookup_member(value)
        return found


def register_enum_membership_rule() -> None:
    """Register the enumMembership plugin with the RuleRegistry."""
    RuleRegistry.register(ENUM_MEMBERSHIP, EnumMembershipEvaluator)
