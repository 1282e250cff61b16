"""Document type matchers.

A ``DocumentMatcher`` owns one regex, the number of capture groups that regex
is expected to produce, and the template used to build the output path from
those groups. Matchers are immutable and shared across a run.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .destination_builder import build_destination
from .errors import ClassificationError, DocCopyError, MalformedPatternDefinition, PatternError
from .models import NO_MATCH, CopyOperation, DocMatchResult, Matched
from .templating import TemplateFieldError, render_template
from .utils import copy_file, normalize_relative_path

LOGGER = logging.getLogger(__name__)

DEFAULT_PRIORITY = 100

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def doc_type_tag(name: str) -> str:
    """Return the log tag for a doc type name (``PackageDoc`` -> ``PACKAGE-DOC``)."""
    return _CAMEL_BOUNDARY.sub("-", name).upper()


@dataclass(frozen=True, slots=True)
class DocumentMatcher:
    name: str
    regex: re.Pattern[str]
    capture_groups: int
    output_template: str
    description: str = ""
    priority: int = DEFAULT_PRIORITY
    builtin: bool = field(default=False, compare=False)

    @classmethod
    def from_definition(
        cls,
        name: str,
        regex: str,
        capture_groups: int,
        output_template: str,
        *,
        description: str = "",
        priority: int = DEFAULT_PRIORITY,
        builtin: bool = False,
    ) -> "DocumentMatcher":
        """Compile a doc type definition.

        Raises:
            PatternError: If ``regex`` does not compile.
        """
        try:
            compiled = re.compile(regex)
        except re.error as exc:
            raise PatternError(regex, f"doc type {name} regex does not compile: {exc}") from exc
        return cls(
            name=name,
            regex=compiled,
            capture_groups=capture_groups,
            output_template=output_template,
            description=description,
            priority=priority,
            builtin=builtin,
        )

    @property
    def tag(self) -> str:
        return doc_type_tag(self.name)

    def _match(self, rel_path: str) -> re.Match[str] | None:
        return self.regex.fullmatch(rel_path)

    def is_match(self, rel_path: str) -> bool:
        try:
            normalized = normalize_relative_path(rel_path)
        except ValueError:
            return False
        return self._match(normalized) is not None

    def resolve_output_path(self, rel_path: str) -> str:
        """Compute the output path (relative to the output root) for ``rel_path``.

        Raises:
            ClassificationError: If the path does not match, or the rendered output
                path is empty, absolute or escapes the output root.
            MalformedPatternDefinition: If the regex produced a different number of
                groups than declared, or the template references an unknown group.
        """
        try:
            normalized = normalize_relative_path(rel_path)
        except ValueError as exc:
            raise ClassificationError(self.name, str(rel_path), str(exc)) from exc

        match = self._match(normalized)
        if match is None:
            raise ClassificationError(self.name, normalized, "path does not match the doc type pattern")

        found = len(match.groups())
        if found != self.capture_groups:
            raise MalformedPatternDefinition(
                self.name,
                normalized,
                self.regex.pattern,
                f"expected {self.capture_groups} capture groups, found {found}",
            )

        try:
            rendered = render_template(self.output_template, match)
        except TemplateFieldError as exc:
            raise MalformedPatternDefinition(self.name, normalized, self.regex.pattern, str(exc)) from exc
        except ValueError as exc:
            raise MalformedPatternDefinition(
                self.name, normalized, self.regex.pattern, f"invalid output template: {exc}"
            ) from exc

        try:
            output_path = normalize_relative_path(rendered)
        except ValueError as exc:
            raise ClassificationError(self.name, normalized, f"invalid output path {rendered!r}: {exc}") from exc
        if not output_path:
            raise ClassificationError(self.name, normalized, "output path is empty")
        return output_path

    def classify(self, rel_path: str) -> DocMatchResult:
        if not self.is_match(rel_path):
            return NO_MATCH
        return Matched(output_path=self.resolve_output_path(rel_path))

    def destination_for(self, rel_path: str, output_root: Path) -> Path:
        output_path = self.resolve_output_path(rel_path)
        try:
            return build_destination(output_root, output_path)
        except ValueError as exc:
            raise ClassificationError(self.name, str(rel_path), str(exc)) from exc

    def copy(
        self,
        source: Path,
        destination: Path,
        *,
        overwrite: bool = True,
        dry_run: bool = False,
    ) -> CopyOperation:
        """Copy ``source`` to an already resolved ``destination``.

        Use ``destination_for`` to compute the destination of a relative path.
        Returns the performed (or, with ``dry_run``, planned) copy operation.

        Raises:
            DocCopyError: If reading the source or writing the destination fails.
        """
        operation = CopyOperation(source=source, destination=destination)
        if dry_run:
            return operation

        try:
            copy_file(source, destination, overwrite=overwrite)
        except OSError as exc:
            raise DocCopyError(self.name, source, destination, str(exc)) from exc
        return operation
