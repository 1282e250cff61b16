from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .validation import (
    ValidationIssue,
    ValidationReport,
    get_section_display_name,
    group_validation_issues,
)


class ValidationFormatter:
    """Renders a ValidationReport as grouped rich panels with line numbers and fix hints."""

    def __init__(
        self,
        console: Optional[Console] = None,
        show_suggestions: bool = True,
        config_data: Optional[Dict[str, Any]] = None,
    ):
        self.console = console or Console()
        self.show_suggestions = show_suggestions
        self.config_data = config_data

    def format_report(self, report: ValidationReport) -> None:
        if report.errors:
            self._format_issues(report.errors, "error", "Validation Errors", "bold red")
        if report.warnings:
            self._format_issues(report.warnings, "warning", "Validation Warnings", "bold yellow")

        if not report.errors and not report.warnings:
            self.console.print("[bold green]✓ Configuration passed validation.[/bold green]")
        elif not report.errors:
            self.console.print("[bold green]✓ Configuration passed validation (with warnings).[/bold green]")

    def _format_issues(
        self,
        issues: List[ValidationIssue],
        severity: str,
        header_text: str,
        header_style: str,
    ) -> None:
        noun = severity if len(issues) == 1 else f"{severity}s"
        self.console.print(f"\n[{header_style}]{header_text}: {len(issues)} {noun} detected[/{header_style}]")
        for root_section, sub_sections in group_validation_issues(issues).items():
            self._format_section(root_section, sub_sections, severity)

    def _format_section(
        self,
        root_section: str,
        sub_sections: Dict[str, List[ValidationIssue]],
        severity: str,
    ) -> None:
        renderables: List[RenderableType] = []
        for sub_section, section_issues in sub_sections.items():
            if sub_section != root_section:
                label = get_section_display_name(sub_section, self.config_data)
                renderables.append(Text(f"→ {label}", style="bold cyan"))
            renderables.append(self._create_issues_table(section_issues))

        self.console.print(
            Panel(
                Group(*renderables),
                title=f"[bold]{get_section_display_name(root_section, self.config_data)}[/bold]",
                border_style="red" if severity == "error" else "yellow",
                padding=(1, 2),
            )
        )

    def _create_issues_table(self, issues: List[ValidationIssue]) -> Table:
        table = Table(show_header=False, show_edge=False, pad_edge=False, box=None, padding=(0, 1))
        table.add_column("Line", style="dim", width=6, no_wrap=True)
        table.add_column("Path", style="cyan", overflow="fold")
        table.add_column("Message", overflow="fold")

        for issue in issues:
            line = f"L{issue.line_number}" if issue.line_number else "-"
            message = Text(issue.message)
            if issue.code:
                message.append(f" ({issue.code})", style="dim")
            table.add_row(line, issue.path, message)

            if self.show_suggestions and issue.fix_suggestion:
                hint = Text()
                hint.append("hint: ", style="yellow")
                hint.append(issue.fix_suggestion, style="italic dim")
                table.add_row("", "", hint)

        return table


__all__ = [
    "ValidationFormatter",
]
