from __future__ import annotations

import re
from string import Formatter
from typing import Any, Sequence

_FORMATTER = Formatter()


class TemplateFieldError(LookupError):
    """A template references a capture group the match did not produce."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"template references unknown group {{{field_name}}}")


def template_fields(template: str) -> list[str]:
    """Return the field names a template references, in order of appearance."""
    return [name for _, name, _, _ in _FORMATTER.parse(template) if name is not None]


def render_template(template: str, match: re.Match[str] | None = None, **extra: Any) -> str:
    """Render ``template`` from a regex match.

    ``{0}`` is the whole match, ``{1}``..``{n}`` are the positional groups and
    ``{name}`` is a named group. Groups that did not participate render as an
    empty string. ``extra`` values are available by name as well.

    Raises:
        TemplateFieldError: If the template references a group that does not exist.
        ValueError: If the template itself is malformed (unbalanced braces).
    """
    positional: Sequence[str] = ()
    named: dict[str, Any] = dict(extra)
    if match is not None:
        positional = (match.group(0), *(value or "" for value in match.groups()))
        named.update({key: value or "" for key, value in match.groupdict().items()})

    for field_name in template_fields(template):
        if not field_name:
            raise TemplateFieldError("")
        root = re.split(r"[.\[]", field_name, maxsplit=1)[0]
        if root.isdigit():
            if int(root) >= len(positional):
                raise TemplateFieldError(field_name)
        elif root not in named:
            raise TemplateFieldError(field_name)

    return template.format(*positional, **named)
