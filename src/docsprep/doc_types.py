from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Any

from .matcher import DEFAULT_PRIORITY, DocumentMatcher
from .utils import load_yaml_file


@dataclass(frozen=True)
class DocTypeDefinition:
    """Uncompiled doc type, as read from YAML."""

    name: str
    regex: str
    capture_groups: int
    output_template: str
    priority: int = DEFAULT_PRIORITY
    description: str = ""

    def compile(self, *, builtin: bool = False) -> DocumentMatcher:
        return DocumentMatcher.from_definition(
            self.name,
            self.regex,
            self.capture_groups,
            self.output_template,
            description=self.description,
            priority=self.priority,
            builtin=builtin,
        )


def parse_doc_type(data: Mapping[str, Any], *, location: str = "doc_types") -> DocTypeDefinition:
    """Build a definition from a raw mapping.

    Raises:
        ValueError: If a required field is missing or has the wrong type.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"'{location}' entries must be mappings")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"'{location}.name' must be a non-empty string")
    name = name.strip()

    regex = data.get("regex")
    if not isinstance(regex, str) or not regex:
        raise ValueError(f"'{location}.regex' must be a non-empty string (doc type {name})")

    capture_groups = data.get("capture_groups")
    if isinstance(capture_groups, bool) or not isinstance(capture_groups, int) or capture_groups < 0:
        raise ValueError(f"'{location}.capture_groups' must be a non-negative integer (doc type {name})")

    output_template = data.get("output_template")
    if not isinstance(output_template, str) or not output_template.strip():
        raise ValueError(f"'{location}.output_template' must be a non-empty string (doc type {name})")

    priority = data.get("priority", DEFAULT_PRIORITY)
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ValueError(f"'{location}.priority' must be an integer (doc type {name})")

    description = data.get("description") or ""
    if not isinstance(description, str):
        raise ValueError(f"'{location}.description' must be a string (doc type {name})")

    return DocTypeDefinition(
        name=name,
        regex=regex,
        capture_groups=capture_groups,
        output_template=output_template,
        priority=priority,
        description=description.strip(),
    )


@lru_cache
def load_builtin_doc_types() -> tuple[DocTypeDefinition, ...]:
    """Load the doc types shipped with docsprep, in dispatch order."""
    with resources.as_file(resources.files(__package__) / "doc_types.yaml") as path:
        data = load_yaml_file(path)

    raw_types = data.get("doc_types")
    if not isinstance(raw_types, list):
        raise ValueError("Builtin doc types must define a 'doc_types' list")

    return tuple(
        parse_doc_type(entry, location=f"doc_types[{index}]") for index, entry in enumerate(raw_types)
    )


def builtin_doc_type_names() -> list[str]:
    return [definition.name for definition in load_builtin_doc_types()]


def merge_doc_types(
    builtin: Iterable[DocTypeDefinition],
    custom: Iterable[DocTypeDefinition] = (),
    disabled: Iterable[str] = (),
) -> list[DocTypeDefinition]:
    """Combine built-in and user doc types into the effective dispatch order.

    Disabled names are dropped. A custom doc type with the same name as a
    built-in replaces it in place. The result is sorted by priority; the sort
    is stable, so equal priorities keep declaration order with built-ins first.

    Raises:
        ValueError: If ``disabled`` names an unknown doc type.
    """
    merged: dict[str, DocTypeDefinition] = {}
    for definition in builtin:
        merged[definition.name] = definition
    for definition in custom:
        merged[definition.name] = definition

    disabled_set = set(disabled)
    unknown = sorted(disabled_set - set(merged))
    if unknown:
        raise ValueError(f"'disabled_doc_types' names unknown doc types: {', '.join(unknown)}")

    ordered = [definition for name, definition in merged.items() if name not in disabled_set]
    ordered.sort(key=lambda definition: definition.priority)
    return ordered


def build_matchers(
    custom: Iterable[DocTypeDefinition] = (),
    disabled: Iterable[str] = (),
) -> tuple[DocumentMatcher, ...]:
    """Compile the effective doc type table.

    Raises:
        PatternError: If a doc type regex does not compile.
        ValueError: If ``disabled`` names an unknown doc type.
    """
    custom = tuple(custom)
    builtin = load_builtin_doc_types()
    builtin_names = {definition.name for definition in builtin}
    definitions = merge_doc_types(builtin, custom, disabled)
    custom_names = {definition.name for definition in custom}
    return tuple(
        definition.compile(builtin=definition.name in builtin_names and definition.name not in custom_names)
        for definition in definitions
    )
