"""Record types shared by the engine, CLI and extractor tests."""

from dataclasses import dataclass
from enum import Enum

from constraintforge.metadata.schema import (
    RecordSchema,
    SchemaRegistry,
    maximum,
    minimum,
    one_of,
    pattern,
    size,
)

NAME_MESSAGE = "size must be between 1 and 20"
COLOR_MESSAGE = "must be one of RED, BLUE, GREEN"
POSTAL_CODE_MESSAGE = "must be a valid postal code (e.g. 123-4567)"


class Color(Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"


@dataclass
class SampleForm:
    name: str | None = None
    age: int | None = None
    postal_code: str | None = None
    color: str | None = None


def sample_form_schema() -> RecordSchema:
    return (
        RecordSchema("SampleForm")
        .field("name", size(min=1, max=20))
        .field("age", minimum(0), maximum(150))
        .field("postal_code", pattern(r"^\d{3}-\d{4}$", message=POSTAL_CODE_MESSAGE))
        .field("color", one_of(Color))
    )


def register_sample_form() -> None:
    SchemaRegistry.register(SampleForm, sample_form_schema())


def valid_form(**overrides) -> SampleForm:
    values = {"name": "name", "age": 20, "postal_code": "123-4567", "color": "RED"}
    values.update(overrides)
    return SampleForm(**values)
