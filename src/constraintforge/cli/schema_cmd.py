"""Schema CLI commands: validate."""

from pathlib import Path

import click

from constraintforge.cli._paths import resolve_schema_path
from constraintforge.metadata.extractor import MetadataExtractor
from constraintforge.metadata.loader import SchemaLoader
from constraintforge.metadata.validator import validate_schema_dir, validate_yaml_file
from constraintforge.validation.evaluators import register_all_rules
from constraintforge.validation.types import ConfigurationError


@click.group()
def schema():
    """Record schema commands."""
    pass


@schema.command()
@click.argument(
    "schema_dir",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Check a single YAML file instead of the whole schema directory.",
)
def validate(schema_dir: Path | None, strict: bool, target_path: Path | None):
    """Check record schema YAML files and build their metadata."""
    schema_path = resolve_schema_path(schema_dir)

    # ── Structural (JSON Schema) checks ─────────────────────────────────────
    if target_path is not None:
        issues = validate_yaml_file(target_path)
        if strict:
            for issue in issues:
                issue.severity = "error"
    else:
        if not schema_path.is_dir():
            click.echo(f"Error: Schema directory not found at {schema_path}", err=True)
            raise SystemExit(1)
        issues = validate_schema_dir(schema_path, strict=strict)

    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # ── Semantic checks: build metadata for every record ────────────────────
    # Single-file mode still loads its siblings so nested references resolve.
    loader = SchemaLoader(target_path.parent if target_path is not None else schema_path)
    extractor = MetadataExtractor()
    try:
        register_all_rules()
        loader.load_all()
        loader.register_all()
        if target_path is not None:
            target = SchemaLoader(target_path.parent).load_file(target_path)
            records = [target.name] if target is not None else []
        else:
            records = loader.list_records()
        for name in records:
            extractor.extract(name)
    except ConfigurationError as e:
        click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(f"\nLoaded {len(records)} record schema(s):")
    for name in sorted(records):
        metadata = extractor.extract(name)
        rule_count = sum(len(d.declared_rules) for d in metadata.field_descriptors)
        click.echo(f"  ✓ {name} ({len(metadata.field_descriptors)} fields, {rule_count} rules)")

    click.echo(click.style("\nAll schemas are valid.", fg="green", bold=True))
