from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import yaml
from jsonschema import Draft7Validator

from .config import DUPLICATE_POLICIES, UNMATCHED_POLICIES
from .doc_types import builtin_doc_type_names
from .errors import PatternError
from .globs import compile_glob
from .templating import template_fields


@dataclass(slots=True)
class ValidationIssue:
    """Represents a single validation problem."""

    severity: str
    path: str
    message: str
    code: str
    line_number: Optional[int] = None
    fix_suggestion: Optional[str] = None


@dataclass(slots=True)
class ValidationReport:
    """Aggregates validation warnings and errors."""

    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


_DOC_TYPE_NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "settings": {
            "type": "object",
            "properties": {
                "input_dir": {"type": "string"},
                "output_dir": {"type": "string"},
                "excludes": {"type": "array", "items": {"type": "string"}},
                "dry_run": {"type": "boolean"},
                "overwrite": {"type": "boolean"},
                "duplicates": {"type": "string", "enum": list(DUPLICATE_POLICIES)},
                "unmatched": {"type": "string", "enum": list(UNMATCHED_POLICIES)},
                "fail_fast": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
        "doc_types": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "regex", "capture_groups", "output_template"],
                "properties": {
                    "name": {"type": "string", "pattern": _DOC_TYPE_NAME_PATTERN},
                    "regex": {"type": "string", "minLength": 1},
                    "capture_groups": {"type": "integer", "minimum": 0},
                    "output_template": {"type": "string", "minLength": 1},
                    "priority": {"type": "integer"},
                    "description": {"type": "string"},
                },
                "additionalProperties": False,
            },
        },
        "disabled_doc_types": {"type": "array", "items": {"type": "string"}},
    },
    "additionalProperties": False,
}


# Fix suggestion generators take (path, message, code)
FixSuggestionGenerator = Callable[[str, str, str], Optional[str]]


def _suggest_schema_fix(path: str, message: str, code: str) -> Optional[str]:
    if "is a required property" in message:
        return "Add the required field to this entry"
    if "Additional properties are not allowed" in message:
        return "Remove the unknown key or check it for typos"
    if "is not of type" in message:
        for json_type, label in (
            ("'string'", "string"),
            ("'object'", "mapping"),
            ("'array'", "list"),
            ("'boolean'", "boolean (true/false)"),
            ("'integer'", "whole number"),
        ):
            if json_type in message:
                return f"Change this field to a {label} value"
    if "is not one of" in message:
        return "Use one of the allowed values listed in the message"
    if "does not match" in message and "name" in path:
        return "Doc type names start with a letter and contain only letters, digits and underscores"
    return "Review the configuration schema requirements for this field"


def _suggest_regex_fix(path: str, message: str, code: str) -> Optional[str]:
    return "Fix the regular expression syntax; remember to quote it with single quotes in YAML so backslashes survive"


def _suggest_capture_groups_fix(path: str, message: str, code: str) -> Optional[str]:
    match = re.search(r"defines (\d+)", message)
    if match:
        return f"Set 'capture_groups' to {match.group(1)} or adjust the groups in 'regex'"
    return "Make 'capture_groups' equal to the number of groups in 'regex'"


def _suggest_template_fix(path: str, message: str, code: str) -> Optional[str]:
    return "Reference groups as {1}..{n} or by name, e.g. {package} for (?P<package>...)"


def _suggest_duplicate_name_fix(path: str, message: str, code: str) -> Optional[str]:
    return "Give each doc type a unique 'name'"


def _suggest_disabled_fix(path: str, message: str, code: str) -> Optional[str]:
    known = ", ".join(builtin_doc_type_names())
    return f"Remove the entry or use a known doc type name (built-ins: {known})"


def _suggest_exclude_fix(path: str, message: str, code: str) -> Optional[str]:
    return "Use a relative pattern such as 'drafts/**' or '**/.git'; '**' must be a whole path segment"


def _suggest_directories_fix(path: str, message: str, code: str) -> Optional[str]:
    return "Point 'output_dir' at a directory different from 'input_dir'"


def _suggest_load_config_fix(path: str, message: str, code: str) -> Optional[str]:
    if "No such file" in message or "not found" in message.lower():
        return "Ensure the configuration file path is correct and the file exists"
    if "Permission denied" in message:
        return "Check file permissions and ensure the configuration file is readable"
    if "YAML" in message or "parse" in message.lower() or "mapping" in message:
        return "Fix YAML syntax errors. Common issues: incorrect indentation, missing colons, unquoted backslashes"
    return "Check the configuration file for syntax errors or file access issues"


FIX_SUGGESTION_REGISTRY: Dict[str, FixSuggestionGenerator] = {
    "schema": _suggest_schema_fix,
    "regex": _suggest_regex_fix,
    "capture-groups": _suggest_capture_groups_fix,
    "output-template": _suggest_template_fix,
    "duplicate-name": _suggest_duplicate_name_fix,
    "disabled-doc-type": _suggest_disabled_fix,
    "exclude-pattern": _suggest_exclude_fix,
    "same-directories": _suggest_directories_fix,
    "load-config": _suggest_load_config_fix,
}


def get_fix_suggestion(issue: ValidationIssue) -> Optional[str]:
    generator = FIX_SUGGESTION_REGISTRY.get(issue.code)
    if generator:
        return generator(issue.path, issue.message, issue.code)
    return None


def extract_yaml_line_numbers(yaml_content: str) -> Dict[str, int]:
    """Map config paths (``doc_types[0].regex``) to 1-based line numbers.

    Uses the node tree PyYAML composes before construction, so marks are exact.
    Returns an empty mapping when the content does not parse.

    Example:
        >>> extract_yaml_line_numbers("settings:\\n  input_dir: ./docs\\n").get("settings.input_dir")
        2
    """
    try:
        root = yaml.compose(yaml_content, Loader=yaml.SafeLoader)
    except yaml.YAMLError:
        return {}

    line_map: Dict[str, int] = {}

    def visit(node: yaml.Node, path: str) -> None:
        if isinstance(node, yaml.MappingNode):
            for key_node, value_node in node.value:
                key = str(key_node.value)
                key_path = f"{path}.{key}" if path else key
                line_map[key_path] = key_node.start_mark.line + 1
                visit(value_node, key_path)
        elif isinstance(node, yaml.SequenceNode):
            for index, item in enumerate(node.value):
                item_path = f"{path}[{index}]"
                line_map[item_path] = item.start_mark.line + 1
                visit(item, item_path)

    if root is not None:
        visit(root, "")
    return line_map


def extract_yaml_line_numbers_from_file(file_path: Path) -> Dict[str, int]:
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError:
        return {}
    return extract_yaml_line_numbers(content)


def _format_jsonschema_path(path: Sequence[Any]) -> str:
    if not path:
        return "<root>"
    tokens: List[str] = []
    for part in path:
        if isinstance(part, int):
            if tokens:
                tokens[-1] = f"{tokens[-1]}[{part}]"
            else:
                tokens.append(f"[{part}]")
        else:
            tokens.append(str(part))
    return ".".join(tokens) if tokens else "<root>"


def _lookup_line(line_map: Optional[Dict[str, int]], path: str) -> Optional[int]:
    if not line_map:
        return None
    # Fall back to the closest ancestor that has a recorded line.
    candidate = path
    while candidate:
        if candidate in line_map:
            return line_map[candidate]
        if candidate.endswith("]"):
            candidate = candidate[: candidate.rfind("[")]
        elif "." in candidate:
            candidate = candidate.rsplit(".", 1)[0]
        else:
            break
    return None


def _add_issue(
    report: ValidationReport,
    *,
    path: str,
    message: str,
    code: str,
    line_map: Optional[Dict[str, int]],
    severity: str = "error",
) -> None:
    generator = FIX_SUGGESTION_REGISTRY.get(code)
    issue = ValidationIssue(
        severity=severity,
        path=path,
        message=message,
        code=code,
        line_number=_lookup_line(line_map, path),
        fix_suggestion=generator(path, message, code) if generator else None,
    )
    if severity == "error":
        report.errors.append(issue)
    else:
        report.warnings.append(issue)


def validate_config_data(
    data: Dict[str, Any],
    line_map: Optional[Dict[str, int]] = None,
) -> ValidationReport:
    """Validate configuration data against the schema and semantic rules.

    Args:
        data: The parsed configuration mapping
        line_map: Optional mapping from config paths to line numbers in the source file

    Returns:
        ValidationReport containing any errors or warnings found
    """
    report = ValidationReport()
    validator = Draft7Validator(CONFIG_SCHEMA)

    for error in sorted(validator.iter_errors(data), key=lambda exc: list(map(str, exc.absolute_path))):
        _add_issue(
            report,
            path=_format_jsonschema_path(error.absolute_path),
            message=error.message,
            code="schema",
            line_map=line_map,
        )

    if isinstance(data, dict):
        _validate_semantics(data, report, line_map)
    return report


def _validate_doc_type(entry: Dict[str, Any], path: str, report: ValidationReport, line_map) -> None:
    regex = entry.get("regex")
    if not isinstance(regex, str) or not regex:
        return
    try:
        compiled = re.compile(regex)
    except re.error as exc:
        _add_issue(
            report,
            path=f"{path}.regex",
            message=f"Regex does not compile: {exc}",
            code="regex",
            line_map=line_map,
        )
        return

    capture_groups = entry.get("capture_groups")
    if isinstance(capture_groups, int) and not isinstance(capture_groups, bool):
        if capture_groups != compiled.groups:
            _add_issue(
                report,
                path=f"{path}.capture_groups",
                message=(
                    f"'capture_groups' is {capture_groups} but the regex defines {compiled.groups} "
                    f"group{'s' if compiled.groups != 1 else ''}"
                ),
                code="capture-groups",
                line_map=line_map,
            )

    template = entry.get("output_template")
    if not isinstance(template, str):
        return
    try:
        fields = template_fields(template)
    except ValueError as exc:
        _add_issue(
            report,
            path=f"{path}.output_template",
            message=f"Output template is malformed: {exc}",
            code="output-template",
            line_map=line_map,
        )
        return

    for field_name in fields:
        root = re.split(r"[.\[]", field_name, maxsplit=1)[0]
        if root.isdigit():
            known = int(root) <= compiled.groups
        else:
            known = bool(root) and root in compiled.groupindex
        if not known:
            _add_issue(
                report,
                path=f"{path}.output_template",
                message=f"Output template references unknown group {{{field_name}}}",
                code="output-template",
                line_map=line_map,
            )


def _validate_semantics(
    data: Dict[str, Any],
    report: ValidationReport,
    line_map: Optional[Dict[str, int]] = None,
) -> None:
    settings = data.get("settings") or {}
    if isinstance(settings, dict):
        excludes = settings.get("excludes") or []
        if isinstance(excludes, list):
            for index, pattern in enumerate(excludes):
                if not isinstance(pattern, str):
                    continue
                try:
                    compile_glob(pattern)
                except PatternError as exc:
                    _add_issue(
                        report,
                        path=f"settings.excludes[{index}]",
                        message=str(exc),
                        code="exclude-pattern",
                        line_map=line_map,
                    )

        input_dir = settings.get("input_dir")
        output_dir = settings.get("output_dir")
        if isinstance(input_dir, str) and isinstance(output_dir, str) and input_dir and output_dir:
            if Path(input_dir).expanduser() == Path(output_dir).expanduser():
                _add_issue(
                    report,
                    path="settings.output_dir",
                    message="'output_dir' must differ from 'input_dir'",
                    code="same-directories",
                    line_map=line_map,
                )

    builtin = set(builtin_doc_type_names())
    names = set(builtin)
    doc_types = data.get("doc_types") or []
    if isinstance(doc_types, list):
        seen: Dict[str, int] = {}
        for index, entry in enumerate(doc_types):
            if not isinstance(entry, dict):
                continue
            path = f"doc_types[{index}]"
            name = entry.get("name")
            if isinstance(name, str):
                if name in seen:
                    _add_issue(
                        report,
                        path=f"{path}.name",
                        message=f"Doc type '{name}' is already defined at doc_types[{seen[name]}]",
                        code="duplicate-name",
                        line_map=line_map,
                    )
                else:
                    seen[name] = index
                if name in builtin and seen[name] == index:
                    _add_issue(
                        report,
                        path=f"{path}.name",
                        message=f"Doc type '{name}' replaces the built-in doc type of the same name",
                        code="builtin-override",
                        line_map=line_map,
                        severity="warning",
                    )
                names.add(name)
            _validate_doc_type(entry, path, report, line_map)

    disabled = data.get("disabled_doc_types") or []
    if isinstance(disabled, list):
        for index, name in enumerate(disabled):
            if isinstance(name, str) and name not in names:
                _add_issue(
                    report,
                    path=f"disabled_doc_types[{index}]",
                    message=f"Unknown doc type '{name}'",
                    code="disabled-doc-type",
                    line_map=line_map,
                )


def group_validation_issues(
    issues: List[ValidationIssue],
) -> Dict[str, Dict[str, List[ValidationIssue]]]:
    """Group validation issues by root section and sub-section.

    Array paths group by their indexed entry (``doc_types[1].regex`` goes under
    ``doc_types[1]``); other paths group by their second-level key.

    Example:
        >>> issues = [
        ...     ValidationIssue("error", "settings.duplicates", "bad value", "schema"),
        ...     ValidationIssue("error", "doc_types[1].regex", "bad regex", "regex"),
        ... ]
        >>> sorted(group_validation_issues(issues))
        ['doc_types', 'settings']
    """
    grouped: Dict[str, Dict[str, List[ValidationIssue]]] = {}

    for issue in issues:
        path = issue.path
        root_match = re.match(r"^([a-zA-Z_][a-zA-Z0-9_-]*)", path)
        root_section = root_match.group(1) if root_match else "<root>"

        if "[" in path:
            match = re.match(r"^([a-zA-Z_][a-zA-Z0-9_.\[\]-]*\[[0-9]+\])", path)
            sub_section = match.group(1) if match else root_section
        else:
            parts = path.split(".")
            sub_section = parts[1] if len(parts) >= 2 else root_section

        grouped.setdefault(root_section, {}).setdefault(sub_section, []).append(issue)

    return grouped


_SECTION_TITLES = {
    "settings": "Settings",
    "doc_types": "Doc Types",
    "disabled_doc_types": "Disabled Doc Types",
    "<root>": "Configuration",
}


def get_section_display_name(section: str, config_data: Optional[Dict[str, Any]] = None) -> str:
    """Human readable title for a section key.

    Indexed doc type entries show the doc type's name when the raw config is
    available, e.g. ``ExampleDoc (doc_types[0])``.
    """
    if section in _SECTION_TITLES:
        return _SECTION_TITLES[section]
    match = re.fullmatch(r"doc_types\[(\d+)\]", section)
    if match and config_data:
        entries = config_data.get("doc_types")
        index = int(match.group(1))
        if isinstance(entries, list) and index < len(entries) and isinstance(entries[index], dict):
            name = entries[index].get("name")
            if isinstance(name, str) and name:
                return f"{name} ({section})"
    return section


__all__ = [
    "ValidationIssue",
    "get_section_display_name",
    "ValidationReport",
    "validate_config_data",
    "CONFIG_SCHEMA",
    "extract_yaml_line_numbers",
    "extract_yaml_line_numbers_from_file",
    "get_fix_suggestion",
    "FIX_SUGGESTION_REGISTRY",
    "group_validation_issues",
]
