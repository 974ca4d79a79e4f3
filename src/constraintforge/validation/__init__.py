"""constraintforge validation system.

This module provides the rule side of the engine:
- Types: declarations, violations, results and errors
- RuleRegistry: rule kind -> evaluator class and default template
- Evaluators: size, range, min, max, pattern, enumMembership
- MessageInterpolator: renders {param} tokens in violation messages

The engine itself lives in ``constraintforge.validation.engine``.

Usage:
    from constraintforge.validation import register_all_rules, RuleRegistry

    # At application startup
    register_all_rules()
    RuleRegistry.freeze()
"""

from constraintforge.validation.evaluators import (
    ENUM_MEMBERSHIP,
    EnumMembershipEvaluator,
    MaxEvaluator,
    MinEvaluator,
    PatternEvaluator,
    RangeEvaluator,
    SizeEvaluator,
    register_all_rules,
    register_builtin_rules,
    register_enum_membership_rule,
)
from constraintforge.validation.registry import (
    BaseEvaluator,
    RuleRegistry,
    evaluate,
    rule,
)
from constraintforge.validation.templating import MessageInterpolator
from constraintforge.validation.types import (
    ConfigurationError,
    ConstraintForgeError,
    FieldDescriptor,
    RecordValidationError,
    RuleDeclaration,
    RuleEvaluator,
    TypeMetadata,
    ValidationResult,
    Violation,
)

__all__ = [
    # Types
    "ConfigurationError",
    "ConstraintForgeError",
    "FieldDescriptor",
    "RecordValidationError",
    "RuleDeclaration",
    "RuleEvaluator",
    "TypeMetadata",
    "ValidationResult",
    "Violation",
    # Registry
    "BaseEvaluator",
    "RuleRegistry",
    "evaluate",
    "rule",
    # Templating
    "MessageInterpolator",
    # Evaluators
    "ENUM_MEMBERSHIP",
    "EnumMembershipEvaluator",
    "MaxEvaluator",
    "MinEvaluator",
    "PatternEvaluator",
    "RangeEvaluator",
    "SizeEvaluator",
    # Setup
    "register_all_rules",
    "register_builtin_rules",
    "register_enum_membership_rule",
]
