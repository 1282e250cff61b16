"""Source file discovery and exclude filtering.

This module walks the documentation source tree, decides which paths are
excluded by the user's exclude patterns, prunes excluded directories, and
yields the remaining files for classification.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from .globs import CompiledGlobSet
from .logging_utils import render_fields_block
from .models import ProcessingStats
from .utils import normalize_relative_path, split_segments

LOGGER = logging.getLogger(__name__)


def _relative_remainder(path: str, input_root: str) -> str:
    if not input_root:
        return path
    if path == input_root:
        return ""
    prefix = input_root + "/"
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def _ancestors(path: str) -> Iterator[str]:
    segments = split_segments(path)
    for end in range(1, len(segments)):
        yield "/".join(segments[:end])


def should_skip_path(
    path: str | os.PathLike[str],
    input_root: str | os.PathLike[str],
    excludes: CompiledGlobSet,
) -> bool:
    """Decide whether ``path`` should be skipped during discovery.

    The root itself is always skipped. Otherwise the path is skipped when an
    exclude pattern matches its remainder under ``input_root``, any ancestor
    directory of that remainder, or the full path as given. Paths that cannot
    be normalized (absolute or escaping) are skipped.
    """
    try:
        normalized_path = normalize_relative_path(path)
        normalized_root = normalize_relative_path(input_root)
    except ValueError:
        return True

    if not normalized_path or normalized_path == normalized_root:
        return True

    remainder = _relative_remainder(normalized_path, normalized_root)
    if not remainder:
        return True

    if not excludes:
        return False

    if excludes.matches(remainder):
        return True
    if any(excludes.matches(ancestor) for ancestor in _ancestors(remainder)):
        return True
    return excludes.matches(normalized_path)


def _log_skip(logger: logging.Logger, path: str, reason: str) -> None:
    logger.debug(
        render_fields_block(
            "Skipping Source Path",
            {
                "Path": path,
                "Reason": reason,
            },
            pad_top=True,
        )
    )


def gather_source_files(
    input_dir: Path,
    excludes: CompiledGlobSet,
    stats: ProcessingStats | None = None,
    *,
    logger: logging.Logger | None = None,
) -> Iterator[tuple[str, Path]]:
    """Discover and yield source files for classification.

    Walks ``input_dir`` top-down in sorted order, pruning excluded directories
    so nothing beneath them is visited.

    Args:
        input_dir: Root of the documentation source tree
        excludes: Compiled exclude patterns, matched against paths relative to the root
        stats: Optional ProcessingStats object to count exclusions and register warnings
        logger: Logger used for skip decisions (defaults to the module logger)

    Yields:
        ``(relative_path, absolute_path)`` tuples, with ``relative_path`` slash separated
    """
    log = logger or LOGGER

    if not input_dir.is_dir():
        log.warning(
            render_fields_block(
                "Source Directory Missing",
                {"Path": input_dir},
                pad_top=True,
            )
        )
        if stats is not None:
            stats.register_warning(f"Source directory missing: {input_dir}")
        return

    for current, dirnames, filenames in os.walk(input_dir):
        current_path = Path(current)
        current_rel = normalize_relative_path(current_path.relative_to(input_dir))

        kept_dirs = []
        for name in sorted(dirnames):
            rel = f"{current_rel}/{name}" if current_rel else name
            if should_skip_path(rel, "", excludes):
                _log_skip(log, rel, "excluded directory")
                if stats is not None:
                    stats.register_excluded()
                continue
            kept_dirs.append(name)
        # Prune in place so os.walk does not descend into excluded directories.
        dirnames[:] = kept_dirs

        for name in sorted(filenames):
            rel = f"{current_rel}/{name}" if current_rel else name
            absolute = current_path / name
            if absolute.is_symlink():
                _log_skip(log, rel, "symlink")
                if stats is not None:
                    stats.register_skipped(f"{rel}: symlinked file not followed")
                continue
            if should_skip_path(rel, "", excludes):
                _log_skip(log, rel, "excluded")
                if stats is not None:
                    stats.register_excluded()
                continue
            yield rel, absolute
