"""Exclude pattern compilation and segment-wise glob matching.

Patterns are split on ``/`` and matched one path segment at a time:

- a literal segment matches an identical segment (case-sensitive)
- ``*`` matches exactly one segment
- a segment with wildcards (``*.md``, ``draft-?``) matches one segment via
  ``fnmatchcase`` and never crosses a ``/``
- ``**`` matches zero or more consecutive segments

A path matches a compiled set when it matches any of its patterns.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase, translate

from .errors import PatternError
from .utils import split_segments

RECURSIVE_WILDCARD = "**"
SINGLE_WILDCARD = "*"

# Characters that turn a segment into a wildcard segment.
_GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True, slots=True)
class GlobPattern:
    source: str
    segments: tuple[str, ...]

    def matches(self, path: str) -> bool:
        return _match_segments(self.segments, tuple(split_segments(path)))


@dataclass(frozen=True, slots=True)
class CompiledGlobSet:
    patterns: tuple[GlobPattern, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def matches(self, path: str) -> bool:
        """Return True if ``path`` matches any pattern in the set."""
        return any(pattern.matches(path) for pattern in self.patterns)

    def matching_pattern(self, path: str) -> str | None:
        """Return the source of the first pattern matching ``path``, if any."""
        for pattern in self.patterns:
            if pattern.matches(path):
                return pattern.source
        return None


EMPTY_GLOB_SET = CompiledGlobSet()


def _is_wildcard_segment(segment: str) -> bool:
    return any(ch in _GLOB_CHARS for ch in segment)


def _segment_matches(pattern_segment: str, path_segment: str) -> bool:
    if pattern_segment == SINGLE_WILDCARD:
        return True
    if _is_wildcard_segment(pattern_segment):
        return fnmatchcase(path_segment, pattern_segment)
    return pattern_segment == path_segment


def _match_segments(pattern: Sequence[str], path: Sequence[str]) -> bool:
    if not pattern:
        return not path

    head = pattern[0]
    if head == RECURSIVE_WILDCARD:
        rest = pattern[1:]
        # Try every split point: ** absorbs path[:index].
        return any(_match_segments(rest, path[index:]) for index in range(len(path) + 1))

    if not path:
        return False
    if not _segment_matches(head, path[0]):
        return False
    return _match_segments(pattern[1:], path[1:])


def compile_glob(pattern: str) -> GlobPattern:
    """Compile a single exclude pattern.

    Raises:
        PatternError: If the pattern is blank, absolute, climbs out of the root
            with ``..``, or contains a malformed segment.
    """
    if not isinstance(pattern, str):
        raise PatternError(str(pattern), "patterns must be strings")

    text = pattern.strip()
    if not text:
        raise PatternError(pattern, "pattern is empty")
    if text.startswith("/"):
        raise PatternError(pattern, "patterns are relative to the input directory and must not start with '/'")

    segments = [segment for segment in text.rstrip("/").split("/") if segment and segment != "."]
    if not segments:
        raise PatternError(pattern, "pattern has no path segments")

    for segment in segments:
        if segment == "..":
            raise PatternError(pattern, "'..' segments are not allowed")
        if RECURSIVE_WILDCARD in segment and segment != RECURSIVE_WILDCARD:
            raise PatternError(pattern, f"'**' must be a whole path segment, got {segment!r}")
        if _is_wildcard_segment(segment):
            try:
                re.compile(translate(segment))
            except re.error as exc:
                raise PatternError(pattern, f"segment {segment!r} is not a valid wildcard: {exc}") from exc

    # Consecutive ** segments are equivalent to a single one.
    collapsed: list[str] = []
    for segment in segments:
        if segment == RECURSIVE_WILDCARD and collapsed and collapsed[-1] == RECURSIVE_WILDCARD:
            continue
        collapsed.append(segment)

    return GlobPattern(source=pattern, segments=tuple(collapsed))


def compile_globs(patterns: Iterable[str] | None) -> CompiledGlobSet:
    """Compile exclude patterns into an immutable set. ``None`` or ``[]`` never matches."""
    if not patterns:
        return EMPTY_GLOB_SET
    return CompiledGlobSet(patterns=tuple(compile_glob(pattern) for pattern in patterns))


def matches(glob_set: CompiledGlobSet, path: str) -> bool:
    return glob_set.matches(path)
