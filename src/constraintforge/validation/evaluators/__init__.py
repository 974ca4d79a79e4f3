"""Rule evaluators for constraintforge.

This module provides the built-in rules and the enum-membership plugin
that can be referenced from record schemas.
"""

from constraintforge.validation.evaluators.builtins import (
    BUILTIN_RULES,
    MaxEvaluator,
    MinEvaluator,
    PatternEvaluator,
    RangeEvaluator,
    SizeEvaluator,
    register_builtin_rules,
)
from constraintforge.validation.evaluators.enum_membership import (
    ENUM_MEMBERSHIP,
    EnumMembershipEvaluator,
    register_enum_membership_rule,
)


def register_all_rules() -> None:
    """Register built-in rules and the shipped plugins."""
    register_builtin_rules()
    register_enum_membership_rule()


__all__ = [
    "BUILTIN_RULES",
    "ENUM_MEMBERSHIP",
    "EnumMembershipEvaluator",
    "MaxEvaluator",
    "MinEvaluator",
    "PatternEvaluator",
    "RangeEvaluator",
    "SizeEvaluator",
    "register_all_rules",
    "register_builtin_rules",
    "register_enum_membership_rule",
]
