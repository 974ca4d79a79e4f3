"""constraintforge: declarative field constraint validation.

Usage:
    from constraintforge import bootstrap, constrained, one_of, size, validate

    @constrained(name=size(min=1, max=20), color=one_of(["RED", "BLUE", "GREEN"]))
    @dataclass
    class SampleForm:
        name: str | None = None
        color: str | None = None

    bootstrap()
    result = validate(SampleForm(name="", color="ORANGE"))
    for violation in result:
        print(violation.property_path, violation.message)
"""

from constraintforge.config import EngineConfig, bootstrap
from constraintforge.metadata.extractor import MetadataExtractor
from constraintforge.metadata.schema import (
    RecordSchema,
    SchemaRegistry,
    constrained,
    maximum,
    minimum,
    nested,
    one_of,
    pattern,
    size,
    value_range,
)
from constraintforge.validation import (
    BaseEvaluator,
    ConfigurationError,
    ConstraintForgeError,
    RecordValidationError,
    RuleDeclaration,
    RuleRegistry,
    ValidationResult,
    Violation,
    rule,
)
from constraintforge.validation.engine import ValidationEngine, validate

__all__ = [
    "BaseEvaluator",
    "ConfigurationError",
    "ConstraintForgeError",
    "EngineConfig",
    "MetadataExtractor",
    "RecordSchema",
    "RecordValidationError",
    "RuleDeclaration",
    "RuleRegistry",
    "SchemaRegistry",
    "ValidationEngine",
    "ValidationResult",
    "Violation",
    "bootstrap",
    "constrained",
    "maximum",
    "minimum",
    "nested",
    "one_of",
    "pattern",
    "rule",
    "size",
    "validate",
    "value_range",
]
