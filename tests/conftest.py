"""Shared fixtures: every test starts with fresh registries."""

import pytest

from constraintforge.metadata.schema import SchemaRegistry
from constraintforge.validation.engine import default_engine
from constraintforge.validation.evaluators import register_all_rules
from constraintforge.validation.registry import RuleRegistry


def _reset() -> None:
    RuleRegistry.clear()
    SchemaRegistry.clear()
    default_engine().extractor.invalidate()


@pytest.fixture(autouse=True)
def setup_registries():
    """Register the shipped rules before each test and clear state after."""
    _reset()
    register_all_rules()
    yield
    _reset()
