"""Load record schemas from YAML files.

Each file declares one record:

    record: SampleForm
    fields:
      - name: name
        rules:
          - kind: size
            params: {min: 1, max: 20}
      - name: postalCode
        rules:
          - kind: pattern
            params: {regexp: '^\\d{3}-\\d{4}$'}
            message: must be a valid postal code
      - name: address
        nested: Address
"""

import logging
from pathlib import Path

import yaml

from constraintforge.metadata.schema import RecordSchema, SchemaRegistry
from constraintforge.validation.types import ConfigurationError

logger = logging.getLogger(__name__)


class SchemaLoader:
    """Loads record schemas from a directory of YAML files."""

    def __init__(self, schema_path: Path):
        self.schema_path = schema_path
        self.schemas: dict[str, RecordSchema] = {}
        self._sources: dict[str, Path] = {}

    def load_all(self) -> None:
        """Load every ``*.yaml`` / ``*.yml`` file under the schema path.

        Raises:
            ConfigurationError: If a file is malformed or two files declare the same record
        """
        if not self.schema_path.is_dir():
            raise ConfigurationError(f"Schema directory does not exist: {self.schema_path}")

        files = sorted(self.schema_path.glob("*.yaml")) + sorted(self.schema_path.glob("*.yml"))
        for yaml_file in files:
            self.load_file(yaml_file)
        logger.info("Loaded %d record schema(s) from %s", len(self.schemas), self.schema_path)

    def load_file(self, yaml_file: Path) -> RecordSchema | None:
        """Load a single schema file. Returns None for files without a record."""
        try:
            with open(yaml_file, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"{yaml_file}: YAML parse error: {exc}") from exc

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(
                f"{yaml_file}: malformed schema: top level must be a mapping, "
                f"got {type(data).__name__}"
            )
        if not data or "record" not in data:
            logger.warning("Skipping %s: no 'record' key", yaml_file)
            return None

        try:
            schema = RecordSchema.from_dict(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise ConfigurationError(f"{yaml_file}: malformed schema: {exc!r}") from exc

        if schema.name in self.schemas:
            raise ConfigurationError(
                f"Duplicate record '{schema.name}' declared in both "
                f"{self._sources[schema.name]} and {yaml_file}"
            )
        self.schemas[schema.name] = schema
        self._sources[schema.name] = yaml_file
        return schema

    def register_all(self) -> None:
        """Bind every loaded schema to its record name in the SchemaRegistry."""
        for name, schema in self.schemas.items():
            SchemaRegistry.register(name, schema)

    def get_schema(self, name: str) -> RecordSchema | None:
        """Get a loaded schema by record name."""
        return self.schemas.get(name)

    def list_records(self) -> list[str]:
        """List all loaded record names."""
        return list(self.schemas.keys())
