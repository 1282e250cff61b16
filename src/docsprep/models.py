from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Union

if TYPE_CHECKING:  # pragma: no cover
    from .matcher import DocumentMatcher


@dataclass(frozen=True, slots=True)
class NoMatch:
    """The path is not a document of the classifying type."""

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Matched:
    output_path: str

    def __bool__(self) -> bool:
        return True


DocMatchResult = Union[NoMatch, Matched]

NO_MATCH = NoMatch()


@dataclass(frozen=True, slots=True)
class CopyOperation:
    source: Path
    destination: Path


@dataclass(slots=True)
class DocFileMatch:
    relative_path: str
    source_path: Path
    output_relative_path: str
    destination_path: Path
    matcher: Optional["DocumentMatcher"]

    @property
    def doc_type(self) -> str:
        return self.matcher.name if self.matcher is not None else "Unmatched"

    def as_operation(self) -> CopyOperation:
        return CopyOperation(source=self.source_path, destination=self.destination_path)


@dataclass(slots=True)
class ProcessingStats:
    processed: int = 0
    skipped: int = 0
    ignored: int = 0
    excluded: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped_details: List[str] = field(default_factory=list)
    ignored_details: List[str] = field(default_factory=list)
    processed_by_doc_type: Dict[str, int] = field(default_factory=dict)
    errors_by_doc_type: Dict[str, int] = field(default_factory=dict)

    def register_processed(self, doc_type: Optional[str] = None) -> None:
        self.processed += 1
        if doc_type:
            self.processed_by_doc_type[doc_type] = self.processed_by_doc_type.get(doc_type, 0) + 1

    def register_skipped(self, reason: str, *, is_error: bool = False, doc_type: Optional[str] = None) -> None:
        self.skipped += 1
        self.skipped_details.append(reason)
        if is_error:
            self.register_error(reason, doc_type=doc_type)

    def register_excluded(self) -> None:
        self.excluded += 1

    def register_warning(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    def register_error(self, message: str, *, doc_type: Optional[str] = None) -> None:
        self.errors.append(message)
        if doc_type:
            self.errors_by_doc_type[doc_type] = self.errors_by_doc_type.get(doc_type, 0) + 1

    def register_ignored(self, detail: Optional[str] = None) -> None:
        self.ignored += 1
        if detail:
            self.ignored_details.append(detail)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
