from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from docsprep.logging_utils import (
    LogBlockBuilder,
    _coerce_items,
    _stringify,
    _wrap_text,
    configure_logging,
    render_fields_block,
    render_section_block,
    resolve_level,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class _TTYStream(io.StringIO):
    def isatty(self) -> bool:
        return True


class TestHelpers:
    """Tests for value conversion helpers."""

    def test_coerce_items_with_mapping(self):
        assert _coerce_items({"a": 1, "b": 2}) == [("a", 1), ("b", 2)]

    def test_coerce_items_with_sequence(self):
        assert _coerce_items([("z", 1), ("a", 2)]) == [("z", 1), ("a", 2)]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            ("  padded  ", "padded"),
            (Path("a") / "b", "a/b"),
            (["x", "y"], "x, y"),
            (3, "3"),
        ],
    )
    def test_stringify(self, value, expected):
        assert _stringify(value) == expected

    def test_wrap_text_keeps_hyphenated_names_whole(self):
        assert _wrap_text("alpha beta-gamma-delta", 16) == ["alpha", "beta-gamma-delta"]


class TestLogBlockBuilder:
    """Tests for LogBlockBuilder rendering."""

    def test_title_underline_and_padding(self):
        rendered = LogBlockBuilder("Title").render()
        assert rendered.split("\n") == ["", "Title", "-----"]

    def test_no_pad_top(self):
        rendered = LogBlockBuilder("Title", pad_top=False).render()
        assert rendered.split("\n")[0] == "Title"

    def test_fields_are_aligned(self):
        builder = LogBlockBuilder("Block", pad_top=False)
        builder.add_fields({"Source": "a.md", "Doc Type": "PackageDoc"})
        lines = builder.render().split("\n")
        assert lines[2] == "    Source  : a.md"
        assert lines[3] == "    Doc Type: PackageDoc"

    def test_long_values_wrap(self):
        builder = LogBlockBuilder("Block", pad_top=False, wrap_width=60)
        builder.add_fields({"Detail": "word " * 40})
        lines = builder.render().split("\n")
        assert len(lines) > 3
        assert all(len(line) <= 60 for line in lines)

    def test_section_with_items(self):
        builder = LogBlockBuilder("Block", pad_top=False)
        builder.add_section("Errors", ["one", None, "two"])
        lines = builder.render().split("\n")
        assert lines[-3:] == ["Errors:", "    - one", "    - two"]

    def test_empty_section(self):
        builder = LogBlockBuilder("Block", pad_top=False)
        builder.add_section("Warnings", [])
        assert builder.render().endswith("Warnings:\n    (none)")

    def test_render_fields_block(self):
        rendered = render_fields_block("Copy", {"Source": "x"}, pad_top=False)
        assert rendered.startswith("Copy\n----")
        assert "Source" in rendered

    def test_render_section_block(self):
        rendered = render_section_block("Recap", [("Copied", ["a", "b"]), ("Failed", [])])
        assert "Copied:" in rendered
        assert "    - b" in rendered
        assert "Failed:\n    (none)" in rendered


class TestResolveLevel:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, logging.INFO),
            ("", logging.INFO),
            ("debug", logging.DEBUG),
            (" WARNING ", logging.WARNING),
            (logging.ERROR, logging.ERROR),
        ],
    )
    def test_resolves(self, value, expected):
        assert resolve_level(value) == expected

    def test_custom_default(self):
        assert resolve_level(None, default=logging.WARNING) == logging.WARNING

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="loud"):
            resolve_level("loud")


class TestConfigureLogging:
    """Tests for configure_logging handler installation."""

    def test_plain_handler_for_non_tty(self, restore_root_logger, monkeypatch):
        monkeypatch.delenv("DOCSPREP_PLAIN_LOGS", raising=False)
        stream = io.StringIO()

        configure_logging("INFO", stream=stream)
        logging.getLogger("docsprep.test").info("hello plain")

        installed = [h for h in restore_root_logger.handlers if getattr(h, "_docsprep_handler", False)]
        assert len(installed) == 1
        assert not isinstance(installed[0], RichHandler)
        assert "hello plain" in stream.getvalue()

    def test_rich_handler_for_tty(self, restore_root_logger, monkeypatch):
        monkeypatch.delenv("DOCSPREP_PLAIN_LOGS", raising=False)

        configure_logging(logging.DEBUG, stream=_TTYStream())

        installed = [h for h in restore_root_logger.handlers if getattr(h, "_docsprep_handler", False)]
        assert len(installed) == 1
        assert isinstance(installed[0], RichHandler)

    def test_plain_logs_env_disables_rich(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("DOCSPREP_PLAIN_LOGS", "1")

        configure_logging(logging.INFO, stream=_TTYStream())

        installed = [h for h in restore_root_logger.handlers if getattr(h, "_docsprep_handler", False)]
        assert not isinstance(installed[0], RichHandler)

    def test_reconfiguring_replaces_handlers(self, restore_root_logger):
        configure_logging(logging.INFO, stream=io.StringIO())
        configure_logging(logging.WARNING, stream=io.StringIO())

        installed = [h for h in restore_root_logger.handlers if getattr(h, "_docsprep_handler", False)]
        assert len(installed) == 1
        assert restore_root_logger.level == logging.WARNING

    def test_log_file_captures_debug(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "docsprep.log"
        stream = io.StringIO()

        configure_logging(logging.WARNING, log_file=log_file, stream=stream)
        logging.getLogger("docsprep.test").debug("debug detail")

        for handler in restore_root_logger.handlers:
            handler.flush()
        assert "debug detail" in log_file.read_text(encoding="utf-8")
        assert "debug detail" not in stream.getvalue()
        assert restore_root_logger.level == logging.DEBUG
