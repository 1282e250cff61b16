from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass
class CommandHelp:
    """Examples, environment variables and tips shown by the RichHelpFormatter."""

    brief_examples: List[Tuple[str, str]] = field(default_factory=list)
    """Brief examples shown in --help (the most common use cases)."""

    extended_examples: List[Tuple[str, str]] = field(default_factory=list)
    """Extended examples shown in --examples."""

    env_vars: List[Tuple[str, str]] = field(default_factory=list)
    """(variable_name, description) pairs."""

    tips: List[str] = field(default_factory=list)


_LOGGING_ENV_VARS = [
    ("DOCSPREP_VERBOSE", "Set to true for debug-level console logging"),
    ("DOCSPREP_LOG_LEVEL", "Console log level: CRITICAL, ERROR, WARNING, INFO, DEBUG (default: INFO)"),
    ("DOCSPREP_PLAIN_LOGS", "Set to true to disable rich console logging even on a terminal"),
    ("DOCSPREP_DEBUG", "Print full tracebacks and error cause chains"),
]

RUN_COMMAND_HELP = CommandHelp(
    brief_examples=[
        ("Preview what would be copied without writing anything", "docsprep run --input docs --output build --dry-run"),
        ("Copy docs using a configuration file", "docsprep run --config docsprep.yaml"),
        ("Skip drafts and git metadata", "docsprep run --input docs --output build --exclude 'drafts/**' --exclude '**/.git'"),
    ],
    extended_examples=[
        ("Preview a run with debug logging", "docsprep run --config docsprep.yaml --dry-run --verbose"),
        ("Fail when two sources map to the same destination", "docsprep run --config docsprep.yaml --duplicates error"),
        ("Keep the first source when destinations collide", "docsprep run --config docsprep.yaml --duplicates first-wins"),
        ("Refuse to replace files that already exist in the output tree", "docsprep run --config docsprep.yaml --no-overwrite"),
        ("Copy files no doc type recognizes to the same relative path", "docsprep run --config docsprep.yaml --unmatched copy"),
        ("Warn about every file no doc type recognizes", "docsprep run --config docsprep.yaml --unmatched report"),
        ("Record all copy failures instead of stopping at the first one", "docsprep run --config docsprep.yaml --keep-going"),
        ("Write a debug log file alongside console output", "docsprep run --config docsprep.yaml --log-file logs/docsprep.log"),
        ("Configure directories through the environment", "DOCSPREP_INPUT_DIR=docs DOCSPREP_OUTPUT_DIR=build docsprep run"),
        ("Run as a Python module", "python -m docsprep run --config docsprep.yaml"),
    ],
    env_vars=[
        ("DOCSPREP_INPUT_DIR", "Documentation source directory (overrides settings.input_dir)"),
        ("DOCSPREP_OUTPUT_DIR", "Output directory (overrides settings.output_dir)"),
        ("DOCSPREP_EXCLUDES", "Comma separated exclude patterns (overrides settings.excludes)"),
        ("DOCSPREP_DRY_RUN", "Set to true to plan copies without writing"),
        *_LOGGING_ENV_VARS,
    ],
    tips=[
        "Always start with --dry-run to check which doc types match",
        "Exclude patterns are relative to the input directory; '*' matches one path segment and '**' any number",
        "An excluded directory excludes everything beneath it",
        "Use 'docsprep classify PATH' to check a single path without touching the filesystem",
        "Command-line flags take precedence over environment variables, which take precedence over the config file",
    ],
)

CLASSIFY_COMMAND_HELP = CommandHelp(
    brief_examples=[
        ("Show the doc type and output path for a file", "docsprep classify packages/core/README.md"),
        ("Classify with custom doc types from a config file", "docsprep classify --config docsprep.yaml packages/core/modules/_docs/intro.md"),
    ],
    extended_examples=[
        ("Classify several paths at once", "docsprep classify packages/core/README.md packages/core/modules/_images/diagram.png"),
        ("Check that a path is not claimed by any doc type", "docsprep classify random/unrelated/file.txt"),
        ("Classify every markdown file in a tree", "find docs -name '*.md' -printf '%P\\n' | xargs docsprep classify"),
    ],
    env_vars=list(_LOGGING_ENV_VARS),
    tips=[
        "Paths are relative to the documentation root, not to the current directory",
        "Classification never reads or writes files",
        "The first doc type in 'docsprep doc-types' order that matches wins",
    ],
)

DOC_TYPES_COMMAND_HELP = CommandHelp(
    brief_examples=[
        ("List the built-in doc types in dispatch order", "docsprep doc-types"),
        ("List the effective doc types for a configuration", "docsprep doc-types --config docsprep.yaml"),
    ],
    extended_examples=[
        ("Show regexes and templates for every doc type", "docsprep doc-types --config docsprep.yaml --verbose"),
    ],
    env_vars=list(_LOGGING_ENV_VARS),
    tips=[
        "Doc types are ordered by priority (default 100); ties keep declaration order with built-ins first",
        "Disable built-in doc types with 'disabled_doc_types' in the configuration",
    ],
)

VALIDATE_CONFIG_COMMAND_HELP = CommandHelp(
    brief_examples=[
        ("Validate a configuration file", "docsprep validate-config --config docsprep.yaml"),
        ("Validate without fix suggestions", "docsprep validate-config --config docsprep.yaml --no-suggestions"),
    ],
    extended_examples=[
        ("Validate in CI and fail the job on errors", "docsprep validate-config --config docsprep.yaml || exit 1"),
        ("Show the full traceback when the file cannot be loaded", "DOCSPREP_DEBUG=1 docsprep validate-config --config docsprep.yaml"),
    ],
    env_vars=list(_LOGGING_ENV_VARS),
    tips=[
        "Validation checks that every doc type regex compiles and defines exactly 'capture_groups' groups",
        "Quote regexes with single quotes in YAML so backslashes are kept",
        "Issues are grouped by section and show the line number in the file",
    ],
)

COMMAND_HELP: Dict[str, CommandHelp] = {
    "run": RUN_COMMAND_HELP,
    "classify": CLASSIFY_COMMAND_HELP,
    "doc-types": DOC_TYPES_COMMAND_HELP,
    "validate-config": VALIDATE_CONFIG_COMMAND_HELP,
}


def get_command_help(command: str) -> CommandHelp:
    """Return the help content for ``command``.

    Raises:
        KeyError: If command is not recognized
    """
    return COMMAND_HELP[command]
