from __future__ import annotations

from docsprep import version


class TestGetVersion:
    """Test version detection priority."""

    def test_environment_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("DOCSPREP_VERSION", " 9.9.9 ")
        assert version.get_version() == "9.9.9"

    def test_release_install(self, monkeypatch) -> None:
        monkeypatch.delenv("DOCSPREP_VERSION", raising=False)
        monkeypatch.setattr(version, "_get_installed_version", lambda: "1.0.0")
        monkeypatch.setattr(version, "_get_git_sha", lambda cwd=None: "abc1234")
        assert version.get_version() == "1.0.0"

    def test_dev_install_appends_sha(self, monkeypatch) -> None:
        monkeypatch.delenv("DOCSPREP_VERSION", raising=False)
        monkeypatch.setattr(version, "_get_installed_version", lambda: "1.1.0.dev0")
        monkeypatch.setattr(version, "_get_git_sha", lambda cwd=None: "abc1234")
        assert version.get_version() == "1.1.0.dev0 (abc1234)"

    def test_source_checkout(self, monkeypatch) -> None:
        monkeypatch.delenv("DOCSPREP_VERSION", raising=False)
        monkeypatch.setattr(version, "_get_installed_version", lambda: None)
        monkeypatch.setattr(version, "_get_git_sha", lambda cwd=None: "abc1234")
        assert version.get_version() == "dev (abc1234)"

    def test_fallback(self, monkeypatch) -> None:
        monkeypatch.delenv("DOCSPREP_VERSION", raising=False)
        monkeypatch.setattr(version, "_get_installed_version", lambda: None)
        monkeypatch.setattr(version, "_get_git_sha", lambda cwd=None: None)
        assert version.get_version() == "unknown"
