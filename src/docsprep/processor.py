from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from rich.progress import Progress

from .config import AppConfig
from .destination_builder import build_destination
from .dispatcher import process_file
from .errors import ClassificationError, DestinationConflictError, DocCopyError
from .file_discovery import gather_source_files
from .globs import CompiledGlobSet
from .logging_utils import render_fields_block
from .match_handler import UNMATCHED_DOC_TYPE, handle_match
from .matcher import DocumentMatcher
from .models import DocFileMatch, ProcessingStats
from .processing_state import ProcessingState
from .run_summary import has_activity, has_detailed_activity, log_detailed_summary, log_run_recap
from .utils import ensure_directory

LOGGER = logging.getLogger(__name__)


class Processor:
    """Walks the input tree and copies every recognized document into the output tree."""

    def __init__(
        self,
        config: AppConfig,
        *,
        matchers: Sequence[DocumentMatcher] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or LOGGER
        self.input_dir, self.output_dir = config.settings.require_directories()
        self.excludes: CompiledGlobSet = config.compile_excludes()
        self.matchers: tuple[DocumentMatcher, ...] = (
            tuple(matchers) if matchers is not None else config.build_matchers()
        )
        if not self.config.settings.dry_run:
            ensure_directory(self.output_dir)

        # Mutable processing state (reset between runs)
        self._state = ProcessingState()

    @property
    def state(self) -> ProcessingState:
        return self._state

    @staticmethod
    def _format_log(event: str, fields: Mapping[str, object] | None = None) -> str:
        return render_fields_block(event, fields or {}, pad_top=True)

    @staticmethod
    def _format_inline_log(event: str, fields: Mapping[str, object] | None = None) -> str:
        return render_fields_block(event, fields or {}, pad_top=False)

    def _gather_source_files(self, stats: ProcessingStats | None = None) -> Iterable[tuple[str, Path]]:
        return gather_source_files(self.input_dir, self.excludes, stats, logger=self.logger)

    def process_all(self) -> ProcessingStats:
        """Process every file under the input directory.

        Raises:
            DocCopyError: If a copy fails and ``fail_fast`` is enabled.
            DestinationConflictError: If two sources map to one destination under the
                ``error`` duplicates policy and ``fail_fast`` is enabled.
        """
        self._state.reset()
        settings = self.config.settings
        stats = ProcessingStats()
        run_started = time.perf_counter()

        source_files = list(self._gather_source_files(stats))
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                self._format_log(
                    "Discovered Candidate Files",
                    {
                        "Input": self.input_dir,
                        "Files": len(source_files),
                        "Excluded": stats.excluded,
                        "Doc Types": [matcher.name for matcher in self.matchers],
                    },
                )
            )

        with Progress(disable=not self.logger.isEnabledFor(logging.INFO)) as progress:
            task_id = progress.add_task("Copying docs", total=len(source_files))
            for rel_path, abs_path in source_files:
                self._process_single_file(rel_path, abs_path, stats)
                progress.advance(task_id, 1)

        if self.logger.isEnabledFor(logging.DEBUG) or has_activity(stats):
            self.logger.info(
                self._format_inline_log(
                    "Summary",
                    {
                        "Processed": stats.processed,
                        "Skipped": stats.skipped,
                        "Ignored": stats.ignored,
                        "Excluded": stats.excluded,
                    },
                )
            )
        for error in stats.errors:
            self.logger.error(self._format_log("Processing Error", {"Detail": error}))

        if stats.errors:
            log_detailed_summary(stats, logger=self.logger)
        elif self.logger.isEnabledFor(logging.DEBUG) and has_detailed_activity(stats):
            log_detailed_summary(stats, level=logging.DEBUG, logger=self.logger)

        duration = time.perf_counter() - run_started
        log_run_recap(
            stats,
            duration,
            touched_destinations=sorted(self._state.touched_destinations),
            overwritten_destinations=self._state.overwritten_destinations,
            output_dir=self.output_dir,
            dry_run=settings.dry_run,
            logger=self.logger,
        )
        return stats

    def _process_single_file(self, rel_path: str, abs_path: Path, stats: ProcessingStats) -> None:
        settings = self.config.settings
        try:
            match = process_file(
                rel_path,
                abs_path,
                self.matchers,
                self.output_dir,
                stats,
                state=self._state,
                settings=settings,
                logger=self.logger,
            )
        except ClassificationError as exc:
            self.logger.error(
                self._format_log(
                    "Classification Failed",
                    {
                        "Source": rel_path,
                        "Doc Type": exc.doc_type,
                        "Error": exc,
                    },
                )
            )
            stats.register_skipped(str(exc), is_error=True, doc_type=exc.doc_type)
            return
        except (DocCopyError, DestinationConflictError) as exc:
            if settings.fail_fast:
                raise
            self._record_copy_failure(rel_path, exc, stats)
            return

        if match is None:
            self._handle_unmatched(rel_path, abs_path, stats)

    def _record_copy_failure(
        self,
        rel_path: str,
        exc: DocCopyError | DestinationConflictError,
        stats: ProcessingStats,
    ) -> None:
        doc_type = getattr(exc, "doc_type", None)
        self.logger.error(
            self._format_log(
                "Copy Failed",
                {
                    "Source": rel_path,
                    "Error": exc,
                },
            )
        )
        stats.register_skipped(str(exc), is_error=True, doc_type=doc_type)

    def _handle_unmatched(self, rel_path: str, abs_path: Path, stats: ProcessingStats) -> None:
        policy = self.config.settings.unmatched
        if policy == "copy":
            match = DocFileMatch(
                relative_path=rel_path,
                source_path=abs_path,
                output_relative_path=rel_path,
                destination_path=build_destination(self.output_dir, rel_path),
                matcher=None,
            )
            try:
                handle_match(
                    match,
                    stats,
                    state=self._state,
                    settings=self.config.settings,
                    output_root=self.output_dir,
                    logger=self.logger,
                )
            except (DocCopyError, DestinationConflictError) as exc:
                if self.config.settings.fail_fast:
                    raise
                self._record_copy_failure(rel_path, exc, stats)
            return

        detail = f"{rel_path}: no doc type matched"
        stats.register_ignored(detail)
        if policy == "report":
            self.logger.warning(
                self._format_log(
                    "Unmatched Source File",
                    {"Source": rel_path, "Doc Type": UNMATCHED_DOC_TYPE},
                )
            )
            stats.register_warning(detail)
        else:
            self.logger.debug(self._format_log("Ignoring Unmatched File", {"Source": rel_path}))
