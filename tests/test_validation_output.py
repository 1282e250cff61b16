from __future__ import annotations

from io import StringIO

from rich.console import Console

from docsprep.validation import ValidationIssue, ValidationReport
from docsprep.validation_output import ValidationFormatter


def _console() -> tuple[Console, StringIO]:
    buffer = StringIO()
    return Console(file=buffer, width=120, force_terminal=False, color_system=None), buffer


class TestValidationFormatter:
    """Test rendering of validation reports."""

    def test_clean_report(self):
        console, buffer = _console()
        ValidationFormatter(console=console).format_report(ValidationReport())
        assert "Configuration passed validation." in buffer.getvalue()

    def test_warnings_only(self):
        console, buffer = _console()
        report = ValidationReport(
            warnings=[ValidationIssue("warning", "doc_types[0].name", "replaces built-in", "builtin-override")]
        )
        ValidationFormatter(console=console).format_report(report)
        output = buffer.getvalue()
        assert "Validation Warnings: 1 warning detected" in output
        assert "passed validation (with warnings)" in output

    def test_errors_with_lines_and_hints(self):
        console, buffer = _console()
        report = ValidationReport(
            errors=[
                ValidationIssue(
                    "error",
                    "doc_types[0].capture_groups",
                    "'capture_groups' is 2 but the regex defines 1 group",
                    "capture-groups",
                    line_number=9,
                    fix_suggestion="Set 'capture_groups' to 1",
                ),
                ValidationIssue("error", "settings.duplicates", "bad value", "schema"),
            ]
        )
        config_data = {"doc_types": [{"name": "Guide"}]}

        ValidationFormatter(console=console, config_data=config_data).format_report(report)

        output = buffer.getvalue()
        assert "Validation Errors: 2 errors detected" in output
        assert "L9" in output
        assert "hint: Set 'capture_groups' to 1" in output
        assert "Guide (doc_types[0])" in output
        assert "Settings" in output
        assert "passed validation" not in output

    def test_suggestions_can_be_hidden(self):
        console, buffer = _console()
        report = ValidationReport(
            errors=[ValidationIssue("error", "<root>", "broken", "load-config", fix_suggestion="Fix it")]
        )
        ValidationFormatter(console=console, show_suggestions=False).format_report(report)
        output = buffer.getvalue()
        assert "broken" in output
        assert "Fix it" not in output
        assert "Configuration" in output
