"""Engine configuration and startup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from constraintforge.metadata.loader import SchemaLoader
from constraintforge.metadata.validator import validate_schema_dir
from constraintforge.validation.evaluators import register_all_rules
from constraintforge.validation.registry import RuleRegistry
from constraintforge.validation.types import ConfigurationError

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class EngineConfig:
    """Startup configuration for the validation engine.

    Attributes:
        schema_path: Directory of YAML record schemas to load, if any
        strict_schemas: Treat schema file warnings as fatal
        log_level: Level for the ``constraintforge`` logger
    """

    schema_path: Path | None = None
    strict_schemas: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Create config from environment variables.

        - CONSTRAINTFORGE_SCHEMA_PATH: schema directory (unset: no YAML schemas)
        - CONSTRAINTFORGE_STRICT_SCHEMAS: 1/true/yes/on
        - CONSTRAINTFORGE_LOG_LEVEL: default WARNING
        """
        schema_path = os.environ.get("CONSTRAINTFORGE_SCHEMA_PATH")
        strict = os.environ.get("CONSTRAINTFORGE_STRICT_SCHEMAS", "")
        return cls(
            schema_path=Path(schema_path) if schema_path else None,
            strict_schemas=strict.strip().lower() in _TRUTHY,
            log_level=os.environ.get("CONSTRAINTFORGE_LOG_LEVEL", "WARNING").upper(),
        )


def bootstrap(config: EngineConfig | None = None) -> SchemaLoader | None:
    """Prepare the process for validation.

    1. Register built-in rules and shipped plugins
    2. Check and load YAML schemas from ``schema_path``
    3. Freeze the rule registry

    Application plugin rules must be registered before calling this.

    Returns:
        The SchemaLoader used, or None when no schema path is configured

    Raises:
        ConfigurationError: If a schema file has errors
    """
    config = config or EngineConfig.from_env()
    logging.getLogger("constraintforge").setLevel(config.log_level)

    register_all_rules()

    loader = None
    if config.schema_path is not None:
        issues = validate_schema_dir(config.schema_path, strict=config.strict_schemas)
        errors = [i for i in issues if i.severity == "error"]
        if errors:
            raise ConfigurationError(
                f"{len(errors)} error(s) in schema files:\n" + "\n".join(str(i) for i in errors)
            )
        loader = SchemaLoader(config.schema_path)
        loader.load_all()
        loader.register_all()

    RuleRegistry.freeze()
    logger.info("Rule registry frozen with %d rule(s)", len(RuleRegistry.list_registered()))
    return loader
