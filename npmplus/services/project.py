"""Resolution of project working directories and their package.json."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from npmplus.exceptions import ValidationError


def resolve_cwd(cwd: str) -> Path:
    """Resolve ``cwd`` to an absolute directory that exists."""
    path = Path(cwd).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    path = path.resolve()
    if not path.exists():
        raise ValidationError(
            f"Invalid project directory: {path} (does not exist)", details={"cwd": str(path)}
        )
    if not path.is_dir():
        raise ValidationError(
            f"Invalid project directory: {path} (not a directory)", details={"cwd": str(path)}
        )
    return path


def is_node_project(path: Path) -> bool:
    return (path / "package.json").is_file()


def resolve_project_dir(cwd: str) -> Path:
    """Resolve ``cwd`` and require a package.json in it."""
    path = resolve_cwd(cwd)
    if not is_node_project(path):
        raise ValidationError(
            f"Invalid project directory: {path} (no package.json found)", details={"cwd": str(path)}
        )
    return path


def read_package_json(path: Path) -> Dict[str, Any]:
    """Load ``path/package.json``; malformed files raise ValidationError."""
    manifest = path / "package.json"
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ValidationError(f"Cannot read {manifest}: {e}", details={"path": str(manifest)}) from e
    if not isinstance(data, dict):
        raise ValidationError(f"{manifest} is not a JSON object", details={"path": str(manifest)})
    return data
