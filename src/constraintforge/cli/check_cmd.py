"""Check CLI command: validate a record file against a schema."""

import json
from pathlib import Path

import click
import yaml

from constraintforge.cli._paths import resolve_schema_path
from constraintforge.metadata.loader import SchemaLoader
from constraintforge.validation.engine import ValidationEngine
from constraintforge.validation.evaluators import register_all_rules
from constraintforge.validation.types import ConfigurationError


@click.command()
@click.argument("record_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--schema", "-s", "schema_name", required=True, help="Record schema name.")
@click.option(
    "--schemas",
    "schema_dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Schema directory (default: $CONSTRAINTFORGE_SCHEMA_PATH or ./schemas).",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def check(record_file: Path, schema_name: str, schema_dir: Path | None, as_json: bool):
    """Validate a YAML or JSON record file.

    Exits 0 when the record is valid, 1 when it has violations and 2 on
    schema configuration errors.
    """
    try:
        with record_file.open(encoding="utf-8") as fh:
            record = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        click.echo(f"Error: cannot parse {record_file}: {exc}", err=True)
        raise SystemExit(2)

    if not isinstance(record, dict):
        click.echo(f"Error: {record_file} must contain a mapping", err=True)
        raise SystemExit(2)

    try:
        register_all_rules()
        loader = SchemaLoader(resolve_schema_path(schema_dir))
        loader.load_all()
        loader.register_all()
        result = ValidationEngine().validate(record, schema=schema_name)
    except ConfigurationError as e:
        click.echo(click.style(f"Configuration error: {e}", fg="red"), err=True)
        raise SystemExit(2)

    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    elif result.valid:
        click.echo(click.style("Record is valid.", fg="green"))
    else:
        for violation in result:
            click.echo(click.style(f"{violation.property_path}: {violation.message}", fg="red"))
        click.echo(click.style(f"\n{len(result)} violation(s) found", fg="red", bold=True))

    if not result.valid:
        raise SystemExit(1)
