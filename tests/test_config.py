"""Tests for runtime configuration."""
from pathlib import Path

from homeport.core.config import (
    DEFAULT_REPO_URL,
    HomeportConfig,
    get_config,
    is_mock,
    set_config,
)


class TestHomeportConfig:
    """Environment driven settings."""

    def test_defaults(self, monkeypatch):
        for var in ("HOMEPORT_ROOT", "HOMEPORT_GIT_TIMEOUT", "HOMEPORT_SERVICE_UID",
                    "HOMEPORT_SERVICE_GID", "HOMEPORT_DEFAULT_REPO"):
            monkeypatch.delenv(var, raising=False)

        config = HomeportConfig.from_env()

        assert config.root == Path("/opt/homeport")
        assert config.git_timeout == 30
        assert (config.service_uid, config.service_gid) == (1000, 1000)
        assert config.default_repo_url == DEFAULT_REPO_URL

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOMEPORT_ROOT", str(tmp_path))
        monkeypatch.setenv("HOMEPORT_GIT_TIMEOUT", "5")
        monkeypatch.setenv("HOMEPORT_SERVICE_UID", "1001")
        monkeypatch.setenv("HOMEPORT_DEFAULT_REPO", "https://example.com/apps.git")

        config = HomeportConfig.from_env()

        assert config.root == tmp_path
        assert config.git_timeout == 5
        assert config.service_uid == 1001
        assert config.default_repo_url == "https://example.com/apps.git"

    def test_derived_paths(self, tmp_path):
        config = HomeportConfig(root=tmp_path)
        assert config.config_file == tmp_path / "db" / "user.json"
        assert config.repos_dir == tmp_path / "repos"


def test_global_config_override(tmp_path):
    custom = HomeportConfig(root=tmp_path)
    set_config(custom)
    assert get_config() is custom


def test_is_mock(monkeypatch):
    monkeypatch.setenv("HOMEPORT_MOCK", "1")
    assert is_mock() is True
    monkeypatch.delenv("HOMEPORT_MOCK")
    assert is_mock() is False
