from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import AppConfig
from .version import __version__


@dataclass
class BannerInfo:
    version: str
    dry_run: bool
    verbose: bool
    input_dir: str
    output_dir: str
    doc_types: list[str]
    exclude_count: int
    overwrite: bool
    duplicates: str
    unmatched: str
    fail_fast: bool
    config_path: str | None = None


def build_banner_info(config: AppConfig, doc_type_names: list[str], verbose: bool = False) -> BannerInfo:
    settings = config.settings
    return BannerInfo(
        version=__version__,
        dry_run=settings.dry_run,
        verbose=verbose,
        input_dir=str(settings.input_dir) if settings.input_dir is not None else "(unset)",
        output_dir=str(settings.output_dir) if settings.output_dir is not None else "(unset)",
        doc_types=list(doc_type_names),
        exclude_count=len(settings.excludes),
        overwrite=settings.overwrite,
        duplicates=settings.duplicates,
        unmatched=settings.unmatched,
        fail_fast=settings.fail_fast,
        config_path=str(config.source) if config.source is not None else None,
    )


def print_startup_banner(info: BannerInfo, console: Console) -> None:
    """Print a styled startup banner showing version and run configuration."""
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="cyan bold", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Version", f"[bold]{info.version}[/bold]")

    mode_parts = []
    if info.dry_run:
        mode_parts.append("[yellow]DRY-RUN[/yellow]")
    if info.verbose:
        mode_parts.append("[cyan]VERBOSE[/cyan]")
    if not info.fail_fast:
        mode_parts.append("[cyan]KEEP-GOING[/cyan]")
    if mode_parts:
        table.add_row("Mode", " ".join(mode_parts))

    if info.config_path:
        table.add_row("Config", info.config_path)
    table.add_row("Input", info.input_dir)
    table.add_row("Output", info.output_dir)
    table.add_row("Doc Types", f"[bold]{len(info.doc_types)}[/bold] ({', '.join(info.doc_types)})")
    if info.exclude_count:
        table.add_row("Excludes", f"{info.exclude_count} pattern{'s' if info.exclude_count != 1 else ''}")

    policies = [
        f"duplicates={info.duplicates}",
        f"unmatched={info.unmatched}",
        "overwrite" if info.overwrite else "[yellow]no-overwrite[/yellow]",
    ]
    table.add_row("Policies", " · ".join(policies))

    console.print()
    console.print(
        Panel(
            table,
            title="[bold white]DOCSPREP[/bold white]",
            border_style="blue",
            padding=(1, 2),
        )
    )
    console.print()
