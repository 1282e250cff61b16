from __future__ import annotations

import os
import posixpath
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

# Boolean true/false string values
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def normalize_relative_path(value: str | os.PathLike[str]) -> str:
    """Return the slash-separated, normalized form of a relative path.

    Platform separators become ``/``, repeated separators collapse, ``.``
    segments and trailing slashes are dropped. The empty path normalizes to
    ``""`` rather than ``"."``.

    Raises:
        ValueError: If the path is absolute or escapes its root via ``..``.
    """
    text = os.fspath(value)
    if os.sep != "/":
        text = text.replace(os.sep, "/")
    if not text or text == ".":
        return ""
    if text.startswith("/"):
        raise ValueError(f"Expected a relative path, got absolute path {text!r}")

    normalized = posixpath.normpath(text)
    if normalized == ".":
        return ""
    if normalized == ".." or normalized.startswith("../"):
        raise ValueError(f"Path {text!r} escapes its root directory")
    return normalized


def split_segments(path: str) -> List[str]:
    """Split a normalized relative path into its segments (``""`` has none)."""
    return path.split("/") if path else []


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def copy_file(source: Path, destination: Path, *, overwrite: bool = True) -> None:
    """Copy ``source`` to ``destination`` byte for byte.

    Missing parent directories of ``destination`` are created. An existing
    destination is replaced unless ``overwrite`` is false, in which case
    ``FileExistsError`` is raised and nothing is written.

    Raises:
        OSError: If the source cannot be read or the destination cannot be written.
    """
    ensure_directory(destination.parent)

    if not overwrite and destination.exists():
        raise FileExistsError(
            f"A file already exists at {destination} and overwriting is disabled. "
            "Most likely another source file maps to the same destination."
        )

    shutil.copyfile(source, destination)


def expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: expand_env(val) for key, val in value.items()}
    return value


def load_yaml_file(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}")
    return expand_env(data)


def parse_env_bool(value: Optional[str]) -> Optional[bool]:
    """Parse a boolean from an environment variable string.

    Returns None if value is None or not a recognized boolean string.
    """
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def env_bool(name: str) -> Optional[bool]:
    """Get a boolean from an environment variable.

    Returns None if not set or not a recognized boolean string.
    """
    return parse_env_bool(os.getenv(name))


def env_list(name: str, separator: str = ",") -> Optional[List[str]]:
    """Get a list of strings from an environment variable.

    Returns None if not set, empty list if set but empty.
    """
    raw = os.getenv(name)
    if raw is None:
        return None
    parts = [part.strip() for part in raw.split(separator) if part.strip()]
    return parts
