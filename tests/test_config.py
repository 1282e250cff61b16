from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from docsprep.config import (
    AppConfig,
    Settings,
    apply_env_overrides,
    apply_overrides,
    build_config,
    load_config,
    resolve_config,
)
from docsprep.errors import PatternError


def write_yaml(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clear_docsprep_env(monkeypatch) -> None:
    for name in ("DOCSPREP_INPUT_DIR", "DOCSPREP_OUTPUT_DIR", "DOCSPREP_EXCLUDES", "DOCSPREP_DRY_RUN"):
        monkeypatch.delenv(name, raising=False)


class TestSettingsDefaults:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.input_dir is None
        assert settings.output_dir is None
        assert settings.excludes == []
        assert settings.dry_run is False
        assert settings.overwrite is True
        assert settings.duplicates == "last-wins"
        assert settings.unmatched == "ignore"
        assert settings.fail_fast is True

    def test_require_directories(self, tmp_path) -> None:
        settings = Settings(input_dir=tmp_path / "in", output_dir=tmp_path / "out")
        assert settings.require_directories() == (tmp_path / "in", tmp_path / "out")

    @pytest.mark.parametrize("missing", ["input_dir", "output_dir"])
    def test_require_directories_missing(self, tmp_path, missing: str) -> None:
        settings = Settings(input_dir=tmp_path / "in", output_dir=tmp_path / "out")
        setattr(settings, missing, None)
        with pytest.raises(ValueError, match=missing):
            settings.require_directories()

    def test_require_directories_rejects_same_directory(self, tmp_path) -> None:
        settings = Settings(input_dir=tmp_path / "docs", output_dir=tmp_path / "docs" / ".." / "docs")
        with pytest.raises(ValueError, match="different"):
            settings.require_directories()


class TestLoadConfig:
    """Test loading configuration files."""

    def test_loads_full_config(self, tmp_path) -> None:
        config_path = write_yaml(
            tmp_path / "docsprep.yaml",
            r"""
            settings:
              input_dir: ./docs
              output_dir: /srv/site
              excludes:
                - drafts/**
                - "**/.git"
              dry_run: true
              overwrite: false
              duplicates: First-Wins
              unmatched: report
              fail_fast: false
            doc_types:
              - name: Guide
                regex: '^guides/(\w+)\.md$'
                capture_groups: 1
                output_template: 'guides/{1}.md'
                priority: 5
            disabled_doc_types:
              - ModuleDoc
            """,
        )

        config = load_config(config_path)

        settings = config.settings
        assert settings.input_dir == tmp_path / "docs"
        assert settings.output_dir == Path("/srv/site")
        assert settings.excludes == ["drafts/**", "**/.git"]
        assert settings.dry_run is True
        assert settings.overwrite is False
        assert settings.duplicates == "first-wins"
        assert settings.unmatched == "report"
        assert settings.fail_fast is False
        assert [definition.name for definition in config.doc_types] == ["Guide"]
        assert config.disabled_doc_types == ["ModuleDoc"]
        assert config.source == config_path

        names = [matcher.name for matcher in config.build_matchers()]
        assert names[0] == "Guide"
        assert "ModuleDoc" not in names

    def test_empty_file_gives_defaults(self, tmp_path) -> None:
        config = load_config(write_yaml(tmp_path / "empty.yaml", ""))
        assert config.settings == Settings()
        assert config.doc_types == []

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ("settings: [a]\n", "settings"),
            ("settings:\n  dry_run: sometimes\n", "dry_run"),
            ("settings:\n  duplicates: random\n", "duplicates"),
            ("settings:\n  unmatched: delete\n", "unmatched"),
            ("settings:\n  excludes: [1]\n", "excludes"),
            ("settings:\n  input_dir: 5\n", "input_dir"),
            ("doc_types: {}\n", "doc_types"),
            ("doc_types:\n  - name: A\n", "regex"),
        ],
    )
    def test_invalid_values_raise(self, tmp_path, content: str, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            load_config(write_yaml(tmp_path / "bad.yaml", content))

    def test_duplicate_doc_type_names_raise(self, tmp_path) -> None:
        entry = "  - name: A\n    regex: '^(a)$'\n    capture_groups: 1\n    output_template: '{1}'\n"
        with pytest.raises(ValueError, match="duplicates"):
            load_config(write_yaml(tmp_path / "dup.yaml", "doc_types:\n" + entry + entry))

    def test_single_exclude_string_becomes_list(self) -> None:
        config = build_config({"settings": {"excludes": "drafts"}})
        assert config.settings.excludes == ["drafts"]

    def test_bad_exclude_pattern_fails_when_compiled(self) -> None:
        config = build_config({"settings": {"excludes": ["/abs"]}})
        with pytest.raises(PatternError):
            config.compile_excludes()


class TestOverrides:
    """Test environment and command-line precedence."""

    def test_env_overrides_file(self, tmp_path, monkeypatch) -> None:
        config = build_config(
            {"settings": {"input_dir": "in", "output_dir": "out", "excludes": ["a"]}},
            base_dir=tmp_path,
        )
        monkeypatch.setenv("DOCSPREP_INPUT_DIR", "/env/in")
        monkeypatch.setenv("DOCSPREP_EXCLUDES", "x/**, y")
        monkeypatch.setenv("DOCSPREP_DRY_RUN", "true")

        updated = apply_env_overrides(config)

        assert updated.settings.input_dir == Path("/env/in")
        assert updated.settings.output_dir == tmp_path / "out"
        assert updated.settings.excludes == ["x/**", "y"]
        assert updated.settings.dry_run is True
        assert config.settings.dry_run is False

    def test_unset_env_keeps_values(self) -> None:
        config = build_config({"settings": {"dry_run": True}})
        assert apply_env_overrides(config).settings.dry_run is True

    def test_explicit_overrides_ignore_none(self) -> None:
        config = build_config({"settings": {"duplicates": "error", "dry_run": True}})
        updated = apply_overrides(config, duplicates=None, dry_run=None, unmatched="copy")
        assert updated.settings.duplicates == "error"
        assert updated.settings.dry_run is True
        assert updated.settings.unmatched == "copy"

    def test_unknown_override_raises(self) -> None:
        with pytest.raises(ValueError, match="colour"):
            apply_overrides(AppConfig(), colour="blue")

    def test_invalid_override_choice_raises(self) -> None:
        with pytest.raises(ValueError, match="duplicates"):
            apply_overrides(AppConfig(), duplicates="sometimes")

    def test_resolve_config_precedence(self, tmp_path, monkeypatch) -> None:
        config_path = write_yaml(
            tmp_path / "docsprep.yaml",
            """
            settings:
              input_dir: file-in
              output_dir: file-out
            """,
        )
        monkeypatch.setenv("DOCSPREP_INPUT_DIR", str(tmp_path / "env-in"))
        monkeypatch.setenv("DOCSPREP_OUTPUT_DIR", str(tmp_path / "env-out"))

        config = resolve_config(config_path, output_dir=tmp_path / "cli-out")

        assert config.settings.input_dir == tmp_path / "env-in"
        assert config.settings.output_dir == tmp_path / "cli-out"

    def test_resolve_config_without_file(self) -> None:
        config = resolve_config(None, excludes=["drafts"])
        assert config.source is None
        assert config.settings.excludes == ["drafts"]
