"""Logging summaries, run recaps, and statistics formatting.

This module formats the end-of-run output: a detailed summary of errors,
warnings and skipped files, and a recap with counts per doc type, duration
and the destinations written.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from .models import ProcessingStats

from .destination_builder import format_relative_destination
from .logging_utils import LogBlockBuilder

LOGGER = logging.getLogger(__name__)

RECAP_DESTINATION_LIMIT = 10


def has_activity(stats: ProcessingStats) -> bool:
    """Return True if the run copied, skipped, ignored or reported anything."""
    return bool(stats.processed or stats.skipped or stats.ignored or stats.errors or stats.warnings)


def has_detailed_activity(stats: ProcessingStats) -> bool:
    return bool(stats.errors or stats.warnings or stats.skipped_details or stats.ignored_details)


def summarize_counts(counts: Dict[str, int], total: int, label: str) -> List[str]:
    """Summarize counts per doc type, largest first.

    Args:
        counts: Mapping of doc type name to count.
        total: Total count across all doc types.
        label: Label for the type of entries (e.g., "error", "file").

    Returns:
        Summary lines, with an ``other`` line for entries not attributed to a doc type.
    """
    if total <= 0:
        return []
    lines: List[str] = []
    for doc_type, value in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
        noun = label if value == 1 else f"{label}s"
        lines.append(f"{doc_type}: {value} {noun}")
    remainder = total - sum(counts.values())
    if remainder > 0:
        noun = label if remainder == 1 else f"{label}s"
        lines.append(f"other: {remainder} {noun}")
    return lines


def summarize_messages(entries: Sequence[str], *, limit: int = 5) -> List[str]:
    """Group duplicate messages and keep the ``limit`` most frequent."""
    if not entries:
        return []
    counter = Counter(entries)
    ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    lines: List[str] = []
    for text, count in ordered[:limit]:
        prefix = f"{count}× " if count > 1 else ""
        lines.append(f"{prefix}{text}")
    remaining = len(ordered) - limit
    if remaining > 0:
        lines.append(f"... {remaining} more (use --verbose for full list)")
    return lines


def log_detailed_summary(
    stats: ProcessingStats,
    *,
    level: int = logging.INFO,
    verbose: Optional[bool] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log errors, warnings, skipped and ignored files in one block.

    In verbose mode (the default when the logger is at DEBUG) every entry is
    listed; otherwise duplicates are grouped and long lists are truncated.
    """
    log = logger or LOGGER
    if verbose is None:
        verbose = log.isEnabledFor(logging.DEBUG)

    def entries(values: Sequence[str]) -> List[str]:
        return list(values) if verbose else summarize_messages(values)

    builder = LogBlockBuilder("Detailed Summary")
    builder.add_fields(
        {
            "Processed": stats.processed,
            "Skipped": stats.skipped,
            "Ignored": stats.ignored,
            "Excluded": stats.excluded,
        }
    )
    if stats.errors:
        builder.add_section("Errors", entries(stats.errors))
        if stats.errors_by_doc_type:
            builder.add_section(
                "Errors By Doc Type",
                summarize_counts(stats.errors_by_doc_type, len(stats.errors), "error"),
            )
    if stats.warnings:
        builder.add_section("Warnings", entries(stats.warnings))
    if stats.skipped_details:
        builder.add_section("Skipped", entries(stats.skipped_details))
    if stats.ignored_details:
        builder.add_section("Ignored", entries(stats.ignored_details))
    log.log(level, builder.render())


def log_run_recap(
    stats: ProcessingStats,
    duration: float,
    *,
    touched_destinations: Sequence[Path] = (),
    overwritten_destinations: Sequence[Path] = (),
    output_dir: Optional[Path] = None,
    dry_run: bool = False,
    logger: Optional[logging.Logger] = None,
) -> None:
    log = logger or LOGGER

    builder = LogBlockBuilder("Run Recap")
    builder.add_fields(
        [
            ("Duration", f"{duration:.2f}s"),
            ("Mode", "dry-run" if dry_run else "copy"),
            ("Copied" if not dry_run else "Would Copy", stats.processed),
            ("Skipped", stats.skipped),
            ("Ignored", stats.ignored),
            ("Excluded", stats.excluded),
            ("Errors", len(stats.errors)),
            ("Warnings", len(stats.warnings)),
        ]
    )
    if stats.processed_by_doc_type:
        builder.add_section(
            "By Doc Type",
            summarize_counts(stats.processed_by_doc_type, stats.processed, "file"),
        )
    if overwritten_destinations:
        builder.add_section(
            "Written More Than Once",
            [_display(path, output_dir) for path in overwritten_destinations],
        )
    if touched_destinations:
        shown = [_display(path, output_dir) for path in touched_destinations[:RECAP_DESTINATION_LIMIT]]
        remaining = len(touched_destinations) - len(shown)
        if remaining > 0:
            shown.append(f"... {remaining} more")
        builder.add_section("Destinations", shown)
    log.info(builder.render())


def _display(path: Path, output_dir: Optional[Path]) -> str:
    if output_dir is None:
        return str(path)
    return format_relative_destination(path, output_dir)
