"""Schema directory resolution shared by CLI commands."""

import os
from pathlib import Path


def resolve_schema_path(explicit: Path | None) -> Path:
    """Resolve the schema directory.

    Resolution order:
    1. Explicit argument/option
    2. CONSTRAINTFORGE_SCHEMA_PATH env var
    3. Default: ./schemas
    """
    if explicit is not None:
        return explicit
    env_path = os.environ.get("CONSTRAINTFORGE_SCHEMA_PATH")
    if env_path:
        return Path(env_path)
    return Path.cwd() / "schemas"
