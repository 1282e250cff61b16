from __future__ import annotations

import argparse
import shutil

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

SECTION_MARKERS = {
    "usage": ">",
    "positional arguments": "#",
    "options": "-",
    "optional arguments": "-",
}


class RichHelpFormatter(argparse.HelpFormatter):
    """Argparse help formatter that renders section titles, examples, env vars and tips with Rich.

    Falls back to plain argparse output when the console is not a terminal,
    so piped ``--help`` output stays grep-friendly.
    """

    def __init__(
        self,
        prog: str,
        indent_increment: int = 2,
        max_help_position: int = 28,
        width: int | None = None,
        console: Console | None = None,
    ) -> None:
        if width is None:
            width = min(shutil.get_terminal_size().columns, 120)

        super().__init__(
            prog=prog,
            indent_increment=indent_increment,
            max_help_position=max_help_position,
            width=width,
        )

        self.console = console or Console()
        self._examples: list[tuple[str, str]] = []
        self._env_vars: list[tuple[str, str]] = []
        self._tips: list[str] = []

    def add_examples(self, examples: list[tuple[str, str]]) -> None:
        self._examples = examples

    def add_environment_variables(self, env_vars: list[tuple[str, str]]) -> None:
        self._env_vars = env_vars

    def add_tips(self, tips: list[str]) -> None:
        self._tips = tips

    def format_help(self) -> str:
        standard_help = super().format_help()
        if not self.console.is_terminal:
            return standard_help

        parts: list[str] = []
        title: str | None = None
        body: list[str] = []
        for line in standard_help.split("\n"):
            # Unindented lines ending in ':' start a new argparse section.
            if line and not line[0].isspace() and line.endswith(":"):
                if title is not None:
                    self._render_section(title, "\n".join(body), parts)
                title, body = line[:-1], []
            elif line.startswith("usage:"):
                if title is not None:
                    self._render_section(title, "\n".join(body), parts)
                title, body = "usage", [line[len("usage:"):].strip()]
            else:
                body.append(line)
        if title is not None:
            self._render_section(title, "\n".join(body), parts)
        elif body:
            parts.append("\n".join(body))

        if self._examples:
            parts.append(self._render_examples())
        if self._env_vars:
            parts.append(self._render_env_vars())
        if self._tips:
            parts.append(self._render_tips())
        return "\n".join(parts)

    def _capture_title(self, label: str) -> str:
        with self.console.capture() as capture:
            self.console.print(Text(label, style="bold bright_cyan"))
        return capture.get()

    def _render_section(self, title: str, content: str, output: list[str]) -> None:
        marker = SECTION_MARKERS.get(title.lower())
        output.append(self._capture_title(f"{marker} {title}" if marker else title))
        if content.strip():
            output.append(content)
        output.append("")

    def _render_examples(self) -> str:
        with self.console.capture() as capture:
            self.console.print(Text("Examples:", style="bold bright_cyan"))
            self.console.print()
            for index, (description, command) in enumerate(self._examples, 1):
                line = Text()
                line.append(f"  {index}. ", style="dim cyan")
                line.append(description, style="bright_white")
                self.console.print(line)
                self.console.print(f"     $ {command}", style="bright_yellow", highlight=False)
                if index < len(self._examples):
                    self.console.print()
            self.console.print()
            self.console.print("  Run with --examples for more usage examples", style="dim italic bright_blue")
        return capture.get()

    def _render_env_vars(self) -> str:
        with self.console.capture() as capture:
            self.console.print(Text("Environment Variables:", style="bold bright_cyan"))
            self.console.print()
            table = Table(show_header=False, box=None, padding=(0, 2))
            table.add_column("Variable", style="bright_green bold", no_wrap=True)
            table.add_column("Description", style="bright_white")
            for name, description in self._env_vars:
                table.add_row(name, description)
            self.console.print(table)
        return capture.get()

    def _render_tips(self) -> str:
        with self.console.capture() as capture:
            self.console.print(Text("Tips:", style="bold bright_cyan"))
            self.console.print()
            for tip in self._tips:
                line = Text()
                line.append("  * ", style="bright_yellow")
                line.append(tip, style="bright_white")
                self.console.print(line)
        return capture.get()


def render_extended_examples(
    command_name: str,
    examples: list[tuple[str, str]],
    console: Console | None = None,
) -> None:
    """Print the cookbook-style example list for ``command_name``.

    Examples are grouped into command-line invocations, ``python -m`` usage and
    everything else (shell pipelines, CI snippets).
    """
    console = console or Console()

    title = Text()
    title.append("Extended Examples: ", style="bold bright_white")
    title.append(f"docsprep {command_name}", style="bold bright_cyan")
    console.print()
    console.print(Panel(title, border_style="bright_cyan"))
    console.print()

    groups: dict[str, list[tuple[str, str]]] = {
        "Command-Line Interface": [],
        "Python Module Usage": [],
        "Other Examples": [],
    }
    for description, command in examples:
        if command.startswith("docsprep "):
            groups["Command-Line Interface"].append((description, command))
        elif command.startswith("python "):
            groups["Python Module Usage"].append((description, command))
        else:
            groups["Other Examples"].append((description, command))

    for heading, entries in groups.items():
        if not entries:
            continue
        console.print(Text(heading, style="bold bright_yellow"))
        console.print()
        for index, (description, command) in enumerate(entries, 1):
            line = Text()
            line.append(f"  {index}. ", style="dim bright_cyan")
            line.append(description, style="bright_white")
            console.print(line)
            console.print(f"     $ {command}", style="bright_green", highlight=False)
            console.print()

    footer = Text()
    footer.append("Tip: ", style="bright_yellow bold")
    footer.append("Use --help to see concise help with common options", style="bright_white")
    console.print(Panel(footer, style="dim bright_blue", border_style="dim bright_blue"))
    console.print()
