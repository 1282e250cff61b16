from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.traceback import Traceback

from .banner import build_banner_info, print_startup_banner
from .command_help import get_command_help
from .config import DUPLICATE_POLICIES, UNMATCHED_POLICIES, build_config, resolve_config
from .dispatcher import classify_path
from .errors import ClassificationError, DocsPrepError
from .help_formatter import RichHelpFormatter, render_extended_examples
from .logging_utils import configure_logging, resolve_level
from .models import Matched
from .processor import Processor
from .utils import env_bool, load_yaml_file
from .validation import (
    ValidationIssue,
    ValidationReport,
    extract_yaml_line_numbers_from_file,
    get_fix_suggestion,
    validate_config_data,
)
from .validation_output import ValidationFormatter
from .version import __version__

LOGGER = logging.getLogger(__name__)

CONSOLE = Console()

DEBUG_ENV = "DOCSPREP_DEBUG"


def print_error(exc: BaseException, *, console: Console | None = None) -> None:
    """Print ``exc`` as one line, or with its full cause chain when DOCSPREP_DEBUG is set."""
    target = console or CONSOLE
    if os.getenv(DEBUG_ENV):
        target.print(Traceback.from_exception(type(exc), exc, exc.__traceback__))
        return
    target.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")


def _formatter_for(command: str) -> Callable[[str], RichHelpFormatter]:
    def factory(prog: str) -> RichHelpFormatter:
        formatter = RichHelpFormatter(prog=prog, console=CONSOLE)
        help_content = get_command_help(command)
        formatter.add_examples(help_content.brief_examples)
        formatter.add_environment_variables(help_content.env_vars)
        formatter.add_tips(help_content.tips)
        return formatter

    return factory


def _resolve_console_level(args: argparse.Namespace) -> int:
    if getattr(args, "verbose", False) or env_bool("DOCSPREP_VERBOSE"):
        return logging.DEBUG
    try:
        return resolve_level(getattr(args, "log_level", None) or os.getenv("DOCSPREP_LOG_LEVEL"))
    except ValueError as exc:
        CONSOLE.print(f"[yellow]Warning:[/yellow] {escape(str(exc))}; using INFO")
        return logging.INFO


def _show_examples(args: argparse.Namespace) -> bool:
    if not getattr(args, "examples", False):
        return False
    render_extended_examples(args.command, get_command_help(args.command).extended_examples, console=CONSOLE)
    return True


def run_process(args: argparse.Namespace) -> int:
    if _show_examples(args):
        return 0

    level = _resolve_console_level(args)
    configure_logging(level, log_file=args.log_file)

    try:
        config = resolve_config(
            args.config,
            input_dir=args.input,
            output_dir=args.output,
            excludes=args.exclude or None,
            dry_run=True if args.dry_run else None,
            overwrite=False if args.no_overwrite else None,
            duplicates=args.duplicates,
            unmatched=args.unmatched,
            fail_fast=False if args.keep_going else None,
        )
        processor = Processor(config)
        if level <= logging.INFO:
            info = build_banner_info(config, [matcher.name for matcher in processor.matchers], verbose=level <= logging.DEBUG)
            print_startup_banner(info, CONSOLE)
        stats = processor.process_all()
    except (DocsPrepError, ValueError, OSError, yaml.YAMLError) as exc:
        print_error(exc)
        return 1

    return 1 if stats.errors else 0


def run_classify(args: argparse.Namespace) -> int:
    if _show_examples(args):
        return 0

    if not args.paths:
        CONSOLE.print("[bold red]Error:[/bold red] classify needs at least one PATH")
        return 2

    configure_logging(_resolve_console_level(args))
    try:
        matchers = resolve_config(args.config).build_matchers()
    except (DocsPrepError, ValueError, OSError, yaml.YAMLError) as exc:
        print_error(exc)
        return 1

    table = Table(title="Classification", show_lines=False)
    table.add_column("Path", style="cyan", overflow="fold")
    table.add_column("Doc Type", style="bold")
    table.add_column("Output", overflow="fold")

    failures = 0
    for path in args.paths:
        try:
            matcher, result = classify_path(path, matchers)
        except ClassificationError as exc:
            failures += 1
            table.add_row(escape(path), f"[red]{escape(exc.doc_type)}[/red]", f"[red]{escape(exc.reason)}[/red]")
            continue
        if matcher is not None and isinstance(result, Matched):
            table.add_row(escape(path), matcher.name, escape(result.output_path))
        else:
            table.add_row(escape(path), "[dim]no match[/dim]", "[dim]-[/dim]")

    CONSOLE.print(table)
    return 1 if failures else 0


def run_doc_types(args: argparse.Namespace) -> int:
    if _show_examples(args):
        return 0

    configure_logging(_resolve_console_level(args))
    try:
        matchers = resolve_config(args.config).build_matchers()
    except (DocsPrepError, ValueError, OSError, yaml.YAMLError) as exc:
        print_error(exc)
        return 1

    table = Table(title="Doc Types (dispatch order)")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="bold cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Groups", justify="right")
    table.add_column("Output Template", overflow="fold")
    if args.verbose:
        table.add_column("Regex", overflow="fold")
        table.add_column("Description", overflow="fold")

    for index, matcher in enumerate(matchers, 1):
        name = matcher.name if matcher.builtin else f"{matcher.name} [dim](custom)[/dim]"
        row = [
            str(index),
            name,
            str(matcher.priority),
            str(matcher.capture_groups),
            escape(matcher.output_template),
        ]
        if args.verbose:
            row.extend([escape(matcher.regex.pattern), escape(matcher.description)])
        table.add_row(*row)

    CONSOLE.print(table)
    return 0


def run_validate_config(args: argparse.Namespace) -> int:
    if _show_examples(args):
        return 0

    config_path: Path = args.config
    report = ValidationReport()
    data = None
    try:
        data = load_yaml_file(config_path)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        issue = ValidationIssue(
            severity="error",
            path="<root>",
            message=f"Unable to load {config_path}: {exc}",
            code="load-config",
        )
        issue.fix_suggestion = get_fix_suggestion(issue)
        report.errors.append(issue)

    if data is not None:
        line_map = extract_yaml_line_numbers_from_file(config_path)
        report = validate_config_data(data, line_map)
        if report.is_valid:
            try:
                build_config(data, base_dir=config_path.parent, source=config_path).build_matchers()
            except (DocsPrepError, ValueError) as exc:
                report.errors.append(ValidationIssue(severity="error", path="<root>", message=str(exc), code="build"))

    formatter = ValidationFormatter(
        console=CONSOLE,
        show_suggestions=not args.no_suggestions,
        config_data=data,
    )
    formatter.format_report(report)
    return 0 if report.is_valid else 1


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging on the console")
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        type=str.upper,
        default=None,
        help="Console log level (default: INFO or DOCSPREP_LOG_LEVEL)",
    )


def _add_examples_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--examples", action="store_true", help="Show extended usage examples and exit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsprep",
        description="Classify documentation source files by path and copy them into a canonical output tree.",
        formatter_class=lambda prog: RichHelpFormatter(prog=prog, console=CONSOLE),
    )
    parser.add_argument("--version", action="version", version=f"docsprep {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    run_parser = subparsers.add_parser(
        "run",
        help="Copy recognized docs from the input tree to the output tree",
        description="Walk the input directory, classify every file and copy recognized docs to the output directory.",
        formatter_class=_formatter_for("run"),
    )
    run_parser.add_argument("--config", "-c", type=Path, default=None, help="Path to a docsprep YAML configuration file")
    run_parser.add_argument("--input", "-i", type=Path, default=None, help="Documentation source directory")
    run_parser.add_argument("--output", "-o", type=Path, default=None, help="Output directory")
    run_parser.add_argument(
        "--exclude",
        "-e",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Exclude pattern relative to the input directory (repeatable)",
    )
    run_parser.add_argument("--dry-run", action="store_true", help="Log planned copies without writing anything")
    run_parser.add_argument(
        "--no-overwrite",
        action="store_true",
        help="Fail instead of replacing files that already exist in the output directory",
    )
    run_parser.add_argument(
        "--duplicates",
        choices=DUPLICATE_POLICIES,
        default=None,
        help="What to do when two sources map to the same destination (default: last-wins)",
    )
    run_parser.add_argument(
        "--unmatched",
        choices=UNMATCHED_POLICIES,
        default=None,
        help="What to do with files no doc type recognizes (default: ignore)",
    )
    run_parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Record copy failures and continue instead of stopping at the first one",
    )
    _add_logging_arguments(run_parser)
    run_parser.add_argument("--log-file", type=Path, default=None, help="Also write debug logs to this file")
    _add_examples_argument(run_parser)
    run_parser.set_defaults(handler=run_process)

    classify_parser = subparsers.add_parser(
        "classify",
        help="Show the doc type and output path for relative paths",
        description="Classify paths relative to the documentation root without touching the filesystem.",
        formatter_class=_formatter_for("classify"),
    )
    classify_parser.add_argument("paths", nargs="*", metavar="PATH", help="Path relative to the documentation root")
    classify_parser.add_argument("--config", "-c", type=Path, default=None, help="Configuration with custom doc types")
    _add_logging_arguments(classify_parser)
    _add_examples_argument(classify_parser)
    classify_parser.set_defaults(handler=run_classify)

    doc_types_parser = subparsers.add_parser(
        "doc-types",
        help="List the effective doc types in dispatch order",
        description="List built-in and configured doc types in the order they are tried.",
        formatter_class=_formatter_for("doc-types"),
    )
    doc_types_parser.add_argument("--config", "-c", type=Path, default=None, help="Configuration with custom doc types")
    _add_logging_arguments(doc_types_parser)
    _add_examples_argument(doc_types_parser)
    doc_types_parser.set_defaults(handler=run_doc_types)

    validate_parser = subparsers.add_parser(
        "validate-config",
        help="Validate a configuration file",
        description="Check a configuration file against the schema and doc type rules.",
        formatter_class=_formatter_for("validate-config"),
    )
    validate_parser.add_argument("--config", "-c", type=Path, required=True, help="Configuration file to validate")
    validate_parser.add_argument("--no-suggestions", action="store_true", help="Hide fix suggestions")
    _add_examples_argument(validate_parser)
    validate_parser.set_defaults(handler=run_validate_config)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
