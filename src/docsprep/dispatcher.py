"""First-match dispatch of relative paths to doc type matchers."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from .destination_builder import build_destination
from .errors import ClassificationError, MalformedPatternDefinition
from .logging_utils import render_fields_block
from .match_handler import handle_match
from .matcher import DocumentMatcher
from .models import NO_MATCH, DocFileMatch, DocMatchResult, Matched, ProcessingStats

if TYPE_CHECKING:
    from .config import Settings
    from .processing_state import ProcessingState

LOGGER = logging.getLogger(__name__)


def select_matcher(rel_path: str, matchers: Sequence[DocumentMatcher]) -> DocumentMatcher | None:
    """Return the first matcher whose pattern accepts ``rel_path``."""
    for matcher in matchers:
        if matcher.is_match(rel_path):
            return matcher
    return None


def classify_path(
    rel_path: str,
    matchers: Sequence[DocumentMatcher],
) -> tuple[DocumentMatcher | None, DocMatchResult]:
    """Select a matcher for ``rel_path`` and compute its output path.

    Raises:
        ClassificationError: If the selected matcher cannot produce an output path.
    """
    matcher = select_matcher(rel_path, matchers)
    if matcher is None:
        return None, NO_MATCH
    try:
        return matcher, Matched(output_path=matcher.resolve_output_path(rel_path))
    except ClassificationError:
        raise
    except MalformedPatternDefinition as exc:
        raise ClassificationError(matcher.name, rel_path, str(exc)) from exc


def process_file(
    rel_path: str,
    abs_path: Path,
    matchers: Sequence[DocumentMatcher],
    output_root: Path,
    stats: ProcessingStats,
    *,
    state: ProcessingState,
    settings: Settings,
    logger: logging.Logger | None = None,
) -> DocFileMatch | None:
    """Classify one file and hand a match to the copy handler.

    Returns the match, or ``None`` when no doc type claims the path.

    Raises:
        ClassificationError: If the path matched but could not be classified.
        DocCopyError: If copying fails.
        DestinationConflictError: If the duplicates policy is ``error`` and the
            destination was already claimed during this run.
    """
    log = logger or LOGGER
    matcher, result = classify_path(rel_path, matchers)
    if not isinstance(result, Matched):
        return None

    try:
        destination = build_destination(output_root, result.output_path)
    except ValueError as exc:
        raise ClassificationError(matcher.name, rel_path, str(exc)) from exc

    match = DocFileMatch(
        relative_path=rel_path,
        source_path=abs_path,
        output_relative_path=result.output_path,
        destination_path=destination,
        matcher=matcher,
    )
    log.debug(
        render_fields_block(
            "Classified Source File",
            {
                "Source": rel_path,
                "Doc Type": matcher.name,
                "Output": result.output_path,
            },
            pad_top=True,
        )
    )
    handle_match(match, stats, state=state, settings=settings, output_root=output_root, logger=log)
    return match
