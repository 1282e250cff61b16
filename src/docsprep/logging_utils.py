from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable, Mapping, MutableSequence, Sequence
from pathlib import Path
from textwrap import wrap
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from .utils import parse_env_bool

DEFAULT_WRAP_WIDTH = 110
DEFAULT_LABEL_WIDTH = 22
DEFAULT_INDENT = "    "

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(module)s:%(lineno)d]: %(message)s"

FieldMapping = Union[Mapping[str, object], Sequence[tuple[str, object]]]


def _coerce_items(fields: FieldMapping) -> list[tuple[str, object]]:
    if isinstance(fields, Mapping):
        return list(fields.items())
    return list(fields)


def _stringify(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(_stringify(item) for item in value)
    return str(value)


def _wrap_text(text: str, width: int) -> list[str]:
    if not text:
        return [""]
    lines: list[str] = []
    for raw_line in text.splitlines() or [""]:
        lines.extend(wrap(raw_line, width=width, break_on_hyphens=False) or [""])
    return lines


class LogBlockBuilder:
    """Builds the titled, aligned multi-line blocks used in log messages."""

    def __init__(
        self,
        title: str,
        *,
        wrap_width: int = DEFAULT_WRAP_WIDTH,
        label_width: int = DEFAULT_LABEL_WIDTH,
        indent: str = DEFAULT_INDENT,
        pad_top: bool = True,
    ) -> None:
        self.title = title
        self.wrap_width = wrap_width
        self.label_width = label_width
        self.indent = indent
        self.lines: MutableSequence[str] = []
        if pad_top:
            self.lines.append("")
        self.lines.extend([title, "-" * len(title)])

    def add_blank_line(self) -> None:
        if self.lines and self.lines[-1] != "":
            self.lines.append("")

    def add_fields(self, fields: FieldMapping | None) -> None:
        pairs = _coerce_items(fields) if fields else []
        if not pairs:
            return

        longest = max(len(str(key)) for key, _ in pairs)
        label_width = max(min(longest, self.label_width), 8)
        value_width = max(self.wrap_width - len(self.indent) - label_width - 4, 32)

        for key, value in pairs:
            first, *rest = _wrap_text(_stringify(value), value_width)
            self.lines.append(f"{self.indent}{str(key):<{label_width}}: {first}")
            for continuation in rest:
                self.lines.append(f"{self.indent}{'':<{label_width}}  {continuation}")

    def add_section(
        self,
        heading: str,
        items: Iterable[object],
        *,
        empty_label: str = "(none)",
    ) -> None:
        self.add_blank_line()
        self.lines.append(f"{heading}:")
        entries = [item for item in items if item is not None]
        if not entries:
            self.lines.append(f"{self.indent}{empty_label}")
            return

        bullet = self.indent + "- "
        hanging = self.indent + "  "
        width = max(self.wrap_width - len(bullet), 24)
        for entry in entries:
            first, *rest = _wrap_text(_stringify(entry), width)
            self.lines.append(f"{bullet}{first}")
            self.lines.extend(f"{hanging}{line}" for line in rest)

    def render(self) -> str:
        return "\n".join(self.lines).rstrip()


def render_fields_block(title: str, fields: FieldMapping, *, pad_top: bool = True) -> str:
    builder = LogBlockBuilder(title, pad_top=pad_top)
    builder.add_fields(fields)
    return builder.render()


def render_section_block(
    title: str,
    sections: Sequence[tuple[str, Sequence[object]]],
    *,
    pad_top: bool = True,
) -> str:
    builder = LogBlockBuilder(title, pad_top=pad_top)
    for heading, items in sections:
        builder.add_section(heading, items)
    return builder.render()


def resolve_level(value: str | int | None, *, default: int = logging.INFO) -> int:
    """Translate a level name (``"debug"``) or number into a logging level.

    Raises:
        ValueError: If ``value`` is a string that names no logging level.
    """
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {value!r}")
    return level


def _use_rich_console(stream) -> bool:
    if parse_env_bool(os.getenv("DOCSPREP_PLAIN_LOGS")):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(
    level: str | int | None = logging.INFO,
    *,
    log_file: Optional[Path] = None,
    console: Optional[Console] = None,
    stream=None,
) -> None:
    """Install console (and optionally file) handlers on the root logger.

    Interactive terminals get a ``RichHandler``; pipes, CI logs and runs with
    ``DOCSPREP_PLAIN_LOGS`` set get a plain ``StreamHandler``. Calling this
    again replaces the handlers installed by a previous call.
    """
    resolved = resolve_level(level)
    target = stream if stream is not None else sys.stderr

    handlers: list[logging.Handler] = []
    if _use_rich_console(target):
        handler: logging.Handler = RichHandler(
            console=console or Console(file=target),
            level=resolved,
            rich_tracebacks=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    else:
        handler = logging.StreamHandler(target)
        handler.setLevel(resolved)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    handlers.append(handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_docsprep_handler", False):
            root.removeHandler(existing)
            existing.close()
    for handler in handlers:
        handler._docsprep_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(min(resolved, logging.DEBUG) if log_file is not None else resolved)
