from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .doc_types import DocTypeDefinition, build_matchers, parse_doc_type
from .globs import CompiledGlobSet, compile_globs
from .matcher import DocumentMatcher
from .utils import env_bool, env_list, load_yaml_file

DUPLICATE_POLICIES = ("last-wins", "first-wins", "error")
UNMATCHED_POLICIES = ("ignore", "report", "copy")

ENV_INPUT_DIR = "DOCSPREP_INPUT_DIR"
ENV_OUTPUT_DIR = "DOCSPREP_OUTPUT_DIR"
ENV_EXCLUDES = "DOCSPREP_EXCLUDES"
ENV_DRY_RUN = "DOCSPREP_DRY_RUN"


@dataclass
class Settings:
    input_dir: Path | None = None
    output_dir: Path | None = None
    excludes: list[str] = field(default_factory=list)
    dry_run: bool = False
    overwrite: bool = True
    duplicates: str = "last-wins"  # last-wins | first-wins | error
    unmatched: str = "ignore"  # ignore | report | copy
    fail_fast: bool = True

    def require_directories(self) -> tuple[Path, Path]:
        """Return ``(input_dir, output_dir)``.

        Raises:
            ValueError: If either directory is unset or both point to the same place.
        """
        if self.input_dir is None:
            raise ValueError("'settings.input_dir' is required (use --input or DOCSPREP_INPUT_DIR)")
        if self.output_dir is None:
            raise ValueError("'settings.output_dir' is required (use --output or DOCSPREP_OUTPUT_DIR)")
        if self.input_dir.resolve() == self.output_dir.resolve():
            raise ValueError("'settings.input_dir' and 'settings.output_dir' must be different directories")
        return self.input_dir, self.output_dir


@dataclass
class AppConfig:
    settings: Settings = field(default_factory=Settings)
    doc_types: list[DocTypeDefinition] = field(default_factory=list)
    disabled_doc_types: list[str] = field(default_factory=list)
    source: Path | None = None

    def build_matchers(self) -> tuple[DocumentMatcher, ...]:
        return build_matchers(self.doc_types, self.disabled_doc_types)

    def compile_excludes(self) -> CompiledGlobSet:
        return compile_globs(self.settings.excludes)


def _ensure_string_list(value: Any, *, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"'{field_name}' must be provided as a list of strings")
    result: list[str] = []
    for index, entry in enumerate(value):
        if not isinstance(entry, str):
            raise ValueError(f"'{field_name}[{index}]' must be a string")
        cleaned = entry.strip()
        if cleaned:
            result.append(cleaned)
    return result


def _ensure_bool(value: Any, *, field_name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"'{field_name}' must be true or false")
    return value


def _ensure_choice(value: Any, *, field_name: str, choices: tuple[str, ...], default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or value.strip().lower() not in choices:
        raise ValueError(f"'{field_name}' must be one of: {', '.join(choices)}")
    return value.strip().lower()


def _optional_path(value: Any, *, field_name: str, base_dir: Path | None) -> Path | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{field_name}' must be a path string")
    path = Path(value).expanduser()
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path


def _build_settings(data: dict[str, Any], *, base_dir: Path | None = None) -> Settings:
    if not isinstance(data, dict):
        raise ValueError("'settings' must be provided as a mapping when specified")

    return Settings(
        input_dir=_optional_path(data.get("input_dir"), field_name="settings.input_dir", base_dir=base_dir),
        output_dir=_optional_path(data.get("output_dir"), field_name="settings.output_dir", base_dir=base_dir),
        excludes=_ensure_string_list(data.get("excludes"), field_name="settings.excludes"),
        dry_run=_ensure_bool(data.get("dry_run"), field_name="settings.dry_run", default=False),
        overwrite=_ensure_bool(data.get("overwrite"), field_name="settings.overwrite", default=True),
        duplicates=_ensure_choice(
            data.get("duplicates"),
            field_name="settings.duplicates",
            choices=DUPLICATE_POLICIES,
            default="last-wins",
        ),
        unmatched=_ensure_choice(
            data.get("unmatched"),
            field_name="settings.unmatched",
            choices=UNMATCHED_POLICIES,
            default="ignore",
        ),
        fail_fast=_ensure_bool(data.get("fail_fast"), field_name="settings.fail_fast", default=True),
    )


def _build_doc_types(raw: Any) -> list[DocTypeDefinition]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("'doc_types' must be provided as a list of doc type definitions")

    definitions: list[DocTypeDefinition] = []
    seen: set[str] = set()
    for index, entry in enumerate(raw):
        definition = parse_doc_type(entry, location=f"doc_types[{index}]")
        if definition.name in seen:
            raise ValueError(f"'doc_types[{index}].name' duplicates doc type {definition.name}")
        seen.add(definition.name)
        definitions.append(definition)
    return definitions


def build_config(data: dict[str, Any], *, base_dir: Path | None = None, source: Path | None = None) -> AppConfig:
    """Build an AppConfig from already-parsed YAML data.

    Relative ``input_dir``/``output_dir`` values are resolved against ``base_dir``
    when one is given.
    """
    settings = _build_settings(data.get("settings") or {}, base_dir=base_dir)
    doc_types = _build_doc_types(data.get("doc_types"))
    disabled = _ensure_string_list(data.get("disabled_doc_types"), field_name="disabled_doc_types")
    return AppConfig(settings=settings, doc_types=doc_types, disabled_doc_types=disabled, source=source)


def load_config(path: Path) -> AppConfig:
    data = load_yaml_file(path)
    return build_config(data, base_dir=path.parent, source=path)


def apply_env_overrides(config: AppConfig) -> AppConfig:
    """Return a copy of ``config`` with ``DOCSPREP_*`` environment overrides applied."""
    settings = config.settings
    env_input = os.getenv(ENV_INPUT_DIR)
    env_output = os.getenv(ENV_OUTPUT_DIR)
    env_excludes = env_list(ENV_EXCLUDES)
    env_dry_run = env_bool(ENV_DRY_RUN)

    settings = replace(
        settings,
        input_dir=Path(env_input).expanduser() if env_input else settings.input_dir,
        output_dir=Path(env_output).expanduser() if env_output else settings.output_dir,
        excludes=settings.excludes if env_excludes is None else env_excludes,
        dry_run=settings.dry_run if env_dry_run is None else env_dry_run,
    )
    return replace(config, settings=settings)


def apply_overrides(config: AppConfig, **overrides: Any) -> AppConfig:
    """Return a copy of ``config`` with explicit (command-line) overrides applied.

    ``None`` values are ignored so unset flags keep the configured value.

    Raises:
        ValueError: If an override names an unknown setting or has an invalid value.
    """
    known = {name for name in Settings.__dataclass_fields__}
    updates: dict[str, Any] = {}
    for name, value in overrides.items():
        if name not in known:
            raise ValueError(f"Unknown setting override '{name}'")
        if value is None:
            continue
        updates[name] = value

    if "duplicates" in updates:
        updates["duplicates"] = _ensure_choice(
            updates["duplicates"], field_name="duplicates", choices=DUPLICATE_POLICIES, default="last-wins"
        )
    if "unmatched" in updates:
        updates["unmatched"] = _ensure_choice(
            updates["unmatched"], field_name="unmatched", choices=UNMATCHED_POLICIES, default="ignore"
        )
    if "excludes" in updates:
        updates["excludes"] = _ensure_string_list(list(updates["excludes"]), field_name="excludes")

    return replace(config, settings=replace(config.settings, **updates))


def resolve_config(path: Path | None, **overrides: Any) -> AppConfig:
    """Load configuration with precedence: overrides > environment > file > defaults."""
    config = load_config(path) if path is not None else AppConfig()
    config = apply_env_overrides(config)
    return apply_overrides(config, **overrides)
