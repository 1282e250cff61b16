"""Destination path building for classified documents.

Output paths produced by doc types are relative and slash separated; this
module joins them onto the output root and guarantees the result stays
inside it.
"""

from __future__ import annotations

from pathlib import Path

from .utils import normalize_relative_path


def build_destination(output_root: Path, output_relative_path: str) -> Path:
    """Join a relative output path onto the output root.

    Args:
        output_root: Root directory of the output tree
        output_relative_path: Slash-separated path produced by a doc type

    Returns:
        The absolute destination path

    Raises:
        ValueError: If the path is empty or the destination escapes the output root
    """
    normalized = normalize_relative_path(output_relative_path)
    if not normalized:
        raise ValueError("output path is empty")

    destination = output_root.joinpath(*normalized.split("/"))

    base_dir = output_root.resolve()
    destination_resolved = destination.resolve(strict=False)
    if not destination_resolved.is_relative_to(base_dir):
        raise ValueError(f"destination {destination_resolved} escapes output_dir {base_dir}")

    return destination


def format_relative_destination(destination: Path, output_root: Path) -> str:
    """Format a destination relative to the output root for log messages.

    Returns the absolute path when the destination is not under the root.
    """
    try:
        relative = destination.relative_to(output_root)
    except ValueError:
        return str(destination)
    return relative.as_posix()
