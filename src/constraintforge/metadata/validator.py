"""
metadata/validator.py: JSON Schema checks for constraintforge YAML schema files.

Checks record schema files for structural problems (missing keys, unknown
properties, malformed rule entries) before the loader turns them into
RecordSchemas. Semantic problems (unknown rule kinds, bad parameters) are
caught later by the MetadataExtractor.

Usage:
    from constraintforge.metadata.validator import validate_schema_dir, validate_yaml_file

    issues = validate_schema_dir(Path("schemas"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

RECORD_SCHEMA = "record.schema.json"

_SCHEMA_FILES = [
    "_defs.schema.json",
    RECORD_SCHEMA,
]


@dataclass
class SchemaIssue:
    """A single finding for a YAML schema file."""

    file: Path
    message: str
    path: str = ""           # location within the document, e.g. "fields[0]/rules[1]"
    severity: str = "error"  # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema(name: str) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open(encoding="utf-8") as fh:
        return json.load(fh)


def _load_registry() -> Registry:
    """Build a jsonschema Registry containing the bundled schemas."""
    resources = []
    for name in _SCHEMA_FILES:
        schema = _load_schema(name)
        resources.append(
            (schema["$id"], Resource(contents=schema, specification=DRAFT202012))
        )
    return Registry().with_resources(resources)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _duplicate_field_issues(yaml_path: Path, doc: dict[str, Any]) -> list[SchemaIssue]:
    seen: set[str] = set()
    issues = []
    for position, field_data in enumerate(doc.get("fields") or []):
        name = field_data.get("name") if isinstance(field_data, dict) else None
        if name is None:
            continue
        if name in seen:
            issues.append(
                SchemaIssue(
                    file=yaml_path,
                    message=f"Field '{name}' is declared more than once",
                    path=f"fields[{position}]",
                )
            )
        seen.add(name)
    return issues


def _empty_field_issues(yaml_path: Path, doc: dict[str, Any]) -> list[SchemaIssue]:
    issues = []
    for position, field_data in enumerate(doc.get("fields") or []):
        if isinstance(field_data, dict) and not field_data.get("rules") and not field_data.get("nested"):
            issues.append(
                SchemaIssue(
                    file=yaml_path,
                    message=f"Field '{field_data.get('name')}' declares no rules",
                    path=f"fields[{position}]",
                    severity="warning",
                )
            )
    return issues


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_yaml_file(
    yaml_path: Path,
    *,
    registry: Registry | None = None,
) -> list[SchemaIssue]:
    """
    Check a single YAML schema file.

    Args:
        yaml_path: Path to the YAML file to check.
        registry:  Pre-built schema registry.  Built automatically if omitted.

    Returns:
        A list of :class:`SchemaIssue` objects (empty on success).
    """
    issues: list[SchemaIssue] = []

    # 1. Parse YAML
    try:
        with yaml_path.open(encoding="utf-8") as fh:
            doc = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [SchemaIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if doc is None:
        return [
            SchemaIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    # 2. Load schema + registry
    if registry is None:
        registry = _load_registry()

    validator = Draft202012Validator(_load_schema(RECORD_SCHEMA), registry=registry)

    # 3. Collect structural errors
    for error in sorted(validator.iter_errors(doc), key=lambda e: [str(p) for p in e.path]):
        issues.append(
            SchemaIssue(
                file=yaml_path,
                message=error.message,
                path=_json_path(error),
            )
        )

    # 4. Checks JSON Schema cannot express
    if isinstance(doc, dict):
        issues.extend(_duplicate_field_issues(yaml_path, doc))
        issues.extend(_empty_field_issues(yaml_path, doc))

    return issues


def validate_schema_dir(
    schema_dir: Path,
    *,
    strict: bool = False,
) -> list[SchemaIssue]:
    """
    Check every YAML file in *schema_dir*.

    Args:
        schema_dir: Directory holding record schema ``.yaml`` files.
        strict:     If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of :class:`SchemaIssue` objects across all files.
        Empty list means all files are valid.
    """
    if not schema_dir.is_dir():
        return [
            SchemaIssue(
                file=schema_dir,
                message=f"Schema directory does not exist: {schema_dir}",
            )
        ]

    # Build the registry once and share it across file checks
    try:
        registry = _load_registry()
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        return [
            SchemaIssue(
                file=_SCHEMAS_DIR,
                message=f"Failed to load JSON Schema files: {exc}",
            )
        ]

    all_issues: list[SchemaIssue] = []

    files = sorted(schema_dir.glob("*.yaml")) + sorted(schema_dir.glob("*.yml"))
    for yaml_file in files:
        file_issues = validate_yaml_file(yaml_file, registry=registry)
        for issue in file_issues:
            if strict and issue.severity == "warning":
                issue.severity = "error"
            if issue.severity == "warning":
                logger.warning("%s", issue)
        all_issues.extend(file_issues)

    return all_issues
