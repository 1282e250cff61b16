from __future__ import annotations

import argparse
from io import StringIO

import pytest
from rich.console import Console

from docsprep.command_help import COMMAND_HELP, CommandHelp, get_command_help
from docsprep.help_formatter import RichHelpFormatter, render_extended_examples


class TestCommandHelp:
    """Test the CommandHelp dataclass and registry."""

    def test_empty_defaults(self) -> None:
        help_content = CommandHelp()
        assert help_content.brief_examples == []
        assert help_content.extended_examples == []
        assert help_content.env_vars == []
        assert help_content.tips == []

    @pytest.mark.parametrize("command", ["run", "classify", "doc-types", "validate-config"])
    def test_every_command_has_help(self, command: str) -> None:
        help_content = get_command_help(command)
        assert isinstance(help_content, CommandHelp)
        assert help_content.brief_examples
        assert help_content.extended_examples
        assert help_content.env_vars
        assert help_content.tips

    def test_unknown_command_raises(self) -> None:
        with pytest.raises(KeyError):
            get_command_help("sync")

    def test_examples_use_docsprep_commands(self) -> None:
        for command, help_content in COMMAND_HELP.items():
            for _, example in help_content.brief_examples:
                assert example.startswith("docsprep "), (command, example)

    def test_run_help_documents_environment(self) -> None:
        names = [name for name, _ in get_command_help("run").env_vars]
        for expected in ["DOCSPREP_INPUT_DIR", "DOCSPREP_OUTPUT_DIR", "DOCSPREP_EXCLUDES", "DOCSPREP_VERBOSE"]:
            assert expected in names


class TestRichHelpFormatter:
    """Test RichHelpFormatter output."""

    def _parser(self, console: Console) -> argparse.ArgumentParser:
        def factory(prog: str) -> RichHelpFormatter:
            formatter = RichHelpFormatter(prog=prog, console=console)
            formatter.add_examples([("Preview a run", "docsprep run --dry-run")])
            formatter.add_environment_variables([("DOCSPREP_VERBOSE", "Debug logging")])
            formatter.add_tips(["Start with --dry-run"])
            return formatter

        parser = argparse.ArgumentParser(prog="docsprep run", formatter_class=factory)
        parser.add_argument("--dry-run", action="store_true", help="Plan copies only")
        return parser

    def test_plain_output_when_not_terminal(self) -> None:
        console = Console(file=StringIO(), force_terminal=False)
        help_text = self._parser(console).format_help()
        assert help_text.startswith("usage: docsprep run")
        assert "Examples:" not in help_text

    def test_rich_output_on_terminal(self) -> None:
        console = Console(file=StringIO(), force_terminal=True, color_system=None, width=100)
        help_text = self._parser(console).format_help()
        assert "> usage" in help_text
        assert "Examples:" in help_text
        assert "$ docsprep run --dry-run" in help_text
        assert "DOCSPREP_VERBOSE" in help_text
        assert "Start with --dry-run" in help_text
        assert "Plan copies only" in help_text


class TestRenderExtendedExamples:
    def test_groups_examples(self) -> None:
        buffer = StringIO()
        console = Console(file=buffer, width=120, color_system=None)
        render_extended_examples(
            "run",
            [
                ("Plain run", "docsprep run --config docsprep.yaml"),
                ("As a module", "python -m docsprep run"),
                ("With env", "DOCSPREP_DRY_RUN=1 docsprep run"),
            ],
            console=console,
        )
        output = buffer.getvalue()
        assert "Extended Examples: docsprep run" in output
        assert "Command-Line Interface" in output
        assert "Python Module Usage" in output
        assert "Other Examples" in output
        assert "$ python -m docsprep run" in output

    def test_empty_groups_are_omitted(self) -> None:
        buffer = StringIO()
        console = Console(file=buffer, width=120, color_system=None)
        render_extended_examples("classify", [("One", "docsprep classify a.md")], console=console)
        output = buffer.getvalue()
        assert "Command-Line Interface" in output
        assert "Python Module Usage" not in output
