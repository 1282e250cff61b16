from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import Mock

from docsprep.models import ProcessingStats
from docsprep.run_summary import (
    RECAP_DESTINATION_LIMIT,
    has_activity,
    has_detailed_activity,
    log_detailed_summary,
    log_run_recap,
    summarize_counts,
    summarize_messages,
)


class TestActivity:
    def test_empty_stats_have_no_activity(self) -> None:
        stats = ProcessingStats()
        assert not has_activity(stats)
        assert not has_detailed_activity(stats)

    def test_processed_counts_as_activity(self) -> None:
        stats = ProcessingStats()
        stats.register_processed("PackageDoc")
        assert has_activity(stats)
        assert not has_detailed_activity(stats)

    def test_excluded_alone_is_not_activity(self) -> None:
        stats = ProcessingStats()
        stats.register_excluded()
        assert not has_activity(stats)

    def test_warnings_are_detailed_activity(self) -> None:
        stats = ProcessingStats()
        stats.register_warning("careful")
        assert has_detailed_activity(stats)


class TestSummarizeCounts:
    """Test summarize_counts."""

    def test_orders_by_count_then_name(self) -> None:
        lines = summarize_counts({"B": 1, "A": 1, "C": 3}, 5, "file")
        assert lines == ["C: 3 files", "A: 1 file", "B: 1 file"]

    def test_remainder_is_other(self) -> None:
        assert summarize_counts({"A": 2}, 3, "error") == ["A: 2 errors", "other: 1 error"]

    def test_zero_total_is_empty(self) -> None:
        assert summarize_counts({}, 0, "file") == []


class TestSummarizeMessages:
    def test_groups_duplicates(self) -> None:
        assert summarize_messages(["a", "b", "a"]) == ["2× a", "b"]

    def test_truncates(self) -> None:
        lines = summarize_messages([f"m{i}" for i in range(8)], limit=3)
        assert lines[:3] == ["m0", "m1", "m2"]
        assert lines[3] == "... 5 more (use --verbose for full list)"

    def test_empty(self) -> None:
        assert summarize_messages([]) == []


class TestLogDetailedSummary:
    """Test log_detailed_summary output."""

    def test_includes_errors_and_doc_type_breakdown(self) -> None:
        stats = ProcessingStats()
        stats.register_skipped("copy failed", is_error=True, doc_type="PackageDoc")
        stats.register_ignored("random/file.txt: no doc type matched")
        logger = Mock(spec=logging.Logger)
        logger.isEnabledFor.return_value = False

        log_detailed_summary(stats, logger=logger)

        level, message = logger.log.call_args.args
        assert level == logging.INFO
        assert "Detailed Summary" in message
        assert "Errors:" in message
        assert "copy failed" in message
        assert "PackageDoc: 1 error" in message
        assert "random/file.txt: no doc type matched" in message

    def test_verbose_lists_every_entry(self) -> None:
        stats = ProcessingStats()
        for index in range(8):
            stats.register_warning(f"warning {index}")
        logger = Mock(spec=logging.Logger)

        log_detailed_summary(stats, level=logging.DEBUG, verbose=True, logger=logger)

        level, message = logger.log.call_args.args
        assert level == logging.DEBUG
        assert "warning 7" in message
        assert "more (use --verbose" not in message


class TestLogRunRecap:
    """Test log_run_recap output."""

    def test_recap_contents(self, tmp_path) -> None:
        stats = ProcessingStats()
        stats.register_processed("PackageDoc")
        stats.register_processed("PackageDoc")
        stats.register_processed("ModuleDoc")
        logger = Mock(spec=logging.Logger)
        destination = tmp_path / "packages" / "core" / "overview.md"

        log_run_recap(
            stats,
            1.234,
            touched_destinations=[destination],
            overwritten_destinations=[destination],
            output_dir=tmp_path,
            logger=logger,
        )

        message = logger.info.call_args.args[0]
        assert "Run Recap" in message
        assert "1.23s" in message
        assert "PackageDoc: 2 files" in message
        assert "Written More Than Once" in message
        assert "packages/core/overview.md" in message

    def test_dry_run_wording(self) -> None:
        logger = Mock(spec=logging.Logger)
        log_run_recap(ProcessingStats(), 0.0, dry_run=True, logger=logger)
        message = logger.info.call_args.args[0]
        assert "dry-run" in message
        assert "Would Copy" in message

    def test_destination_list_is_truncated(self, tmp_path) -> None:
        logger = Mock(spec=logging.Logger)
        destinations = [tmp_path / f"doc{index}.md" for index in range(RECAP_DESTINATION_LIMIT + 3)]

        log_run_recap(ProcessingStats(), 0.5, touched_destinations=destinations, output_dir=tmp_path, logger=logger)

        message = logger.info.call_args.args[0]
        assert "... 3 more" in message
        assert f"doc{RECAP_DESTINATION_LIMIT}.md" not in message

    def test_paths_outside_output_dir_are_absolute(self) -> None:
        logger = Mock(spec=logging.Logger)
        log_run_recap(
            ProcessingStats(),
            0.1,
            touched_destinations=[Path("/elsewhere/file.md")],
            logger=logger,
        )
        assert "/elsewhere/file.md" in logger.info.call_args.args[0]
