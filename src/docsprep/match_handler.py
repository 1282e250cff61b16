"""Copying matched documents into the output tree.

This module applies the run-level policies for a matched file: what happens
when two sources map to the same destination, whether a pre-existing file
may be replaced, and dry-run mode.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .destination_builder import format_relative_destination
from .errors import DestinationConflictError, DocCopyError
from .logging_utils import render_fields_block
from .matcher import doc_type_tag
from .models import DocFileMatch, ProcessingStats
from .utils import copy_file

if TYPE_CHECKING:
    from .config import Settings
    from .processing_state import ProcessingState

LOGGER = logging.getLogger(__name__)

UNMATCHED_DOC_TYPE = "Unmatched"


def _copy_unmatched(match: DocFileMatch, *, overwrite: bool) -> None:
    try:
        copy_file(match.source_path, match.destination_path, overwrite=overwrite)
    except OSError as exc:
        raise DocCopyError(UNMATCHED_DOC_TYPE, match.source_path, match.destination_path, str(exc)) from exc


def handle_match(
    match: DocFileMatch,
    stats: ProcessingStats,
    *,
    state: ProcessingState,
    settings: Settings,
    output_root: Path,
    logger: logging.Logger | None = None,
) -> bool:
    """Copy a matched file, honoring the duplicates, overwrite and dry-run settings.

    Args:
        match: The classified file.
        stats: Processing statistics to update.
        state: Per-run state tracking which destinations were already claimed.
        settings: Run settings (``duplicates``, ``overwrite``, ``dry_run``).
        output_root: Root of the output tree, used for display and copying.
        logger: Logger instance for output.

    Returns:
        True if the file was copied (or would have been, in dry-run mode).

    Raises:
        DestinationConflictError: If ``duplicates`` is ``error`` and another source
            already claimed the destination.
        DocCopyError: If the copy fails.
    """
    log = logger or LOGGER
    destination = match.destination_path
    display = format_relative_destination(destination, output_root)

    previous = state.claimed_destinations.get(destination)
    if previous is not None:
        if settings.duplicates == "error":
            raise DestinationConflictError(destination, previous, match.source_path)
        if settings.duplicates == "first-wins":
            message = f"Destination {display} already written from {previous}; skipping {match.source_path}"
            log.warning(
                render_fields_block(
                    "Skipping Duplicate Destination",
                    {
                        "Destination": display,
                        "Kept": previous,
                        "Skipped": match.source_path,
                    },
                    pad_top=True,
                )
            )
            stats.register_skipped(message, doc_type=match.doc_type)
            stats.register_warning(message)
            return False
        log.debug(
            render_fields_block(
                "Replacing Destination From Earlier Source",
                {
                    "Destination": display,
                    "Previous": previous,
                    "Source": match.source_path,
                },
                pad_top=True,
            )
        )

    # Destinations written earlier in this run are always replaceable; the
    # overwrite setting only protects files that existed before the run.
    overwrite = settings.overwrite or destination in state.touched_destinations

    log.info("Copying %s file %s to %s", doc_type_tag(match.doc_type), match.relative_path, display)

    if not settings.dry_run:
        if match.matcher is None:
            _copy_unmatched(match, overwrite=overwrite)
        else:
            match.matcher.copy(match.source_path, destination, overwrite=overwrite)
        state.touched_destinations.add(destination)

    # Only sources that reached the destination claim it.
    state.claim(destination, match.source_path)
    if previous is not None:
        state.overwritten_destinations.append(destination)
    stats.register_processed(match.doc_type)
    return True
