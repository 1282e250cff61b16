"""Version detection with support for development builds."""

from __future__ import annotations

import os
import subprocess
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "docsprep"

# Fallback version if nothing else works
_FALLBACK_VERSION = "unknown"


def _get_git_sha(cwd: Path | None = None) -> str | None:
    """Return the short SHA of HEAD, or None outside a Git checkout."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
            cwd=cwd,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    sha = result.stdout.strip()
    return sha if result.returncode == 0 and sha else None


def _get_installed_version() -> str | None:
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return None


def get_version() -> str:
    """Get the current version string.

    Priority:
    1. DOCSPREP_VERSION environment variable (stamped by release builds)
    2. Installed distribution metadata, with the Git SHA appended for dev builds
    3. Git SHA of the source checkout
    4. Fallback to "unknown"

    Returns:
        Version string like "0.3.0", "0.3.0.dev0 (abc1234)", "dev (abc1234)" or "unknown".
    """
    stamped = os.environ.get("DOCSPREP_VERSION")
    if stamped and stamped.strip():
        return stamped.strip()

    installed = _get_installed_version()
    if installed and ".dev" not in installed:
        return installed

    sha = _get_git_sha(Path(__file__).resolve().parent)
    if installed:
        return f"{installed} ({sha})" if sha else installed
    if sha:
        return f"dev ({sha})"
    return _FALLBACK_VERSION


# Cache the version on module load
__version__ = get_version()
