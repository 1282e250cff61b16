"""Error types raised while compiling patterns, classifying and copying docs."""

from __future__ import annotations

from pathlib import Path


class DocsPrepError(Exception):
    """Base class for all docsprep errors."""


class PatternError(DocsPrepError, ValueError):
    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")


class MalformedPatternDefinition(DocsPrepError):
    """A doc type's regex or template disagrees with its declared capture groups.

    This is a defect in the doc type definition itself, never in the input data.
    """

    def __init__(self, doc_type: str, path: str, regex: str, detail: str) -> None:
        self.doc_type = doc_type
        self.path = path
        self.regex = regex
        self.detail = detail
        super().__init__(f"Doc type {doc_type} is misconfigured for path {path} (regex {regex}): {detail}")


class ClassificationError(DocsPrepError):
    def __init__(self, doc_type: str, path: str, reason: str) -> None:
        self.doc_type = doc_type
        self.path = path
        self.reason = reason
        super().__init__(f"Could not classify {path} as {doc_type}: {reason}")


class DocCopyError(DocsPrepError, OSError):
    def __init__(self, doc_type: str, source: Path, destination: Path, reason: str) -> None:
        self.doc_type = doc_type
        self.source = source
        self.destination = destination
        self.reason = reason
        super().__init__(f"Failed to copy {doc_type} file {source} to {destination}: {reason}")


class DestinationConflictError(DocsPrepError):
    def __init__(self, destination: Path, first_source: Path, second_source: Path) -> None:
        self.destination = destination
        self.first_source = first_source
        self.second_source = second_source
        super().__init__(
            f"Both {first_source} and {second_source} map to {destination}. "
            "Set 'duplicates' to 'last-wins' or 'first-wins' to allow this."
        )
