"""Tests for SettingsManager."""

from pathlib import Path

import pytest

from debapps.config.paths import Paths
from debapps.config.settings import SettingsManager, SystemPaths


class TestSettingsManager:
    """Test settings.conf creation and parsing."""

    def test_creates_default_file(self, tmp_path):
        manager = SettingsManager(tmp_path)

        settings = manager.load()

        assert manager.settings_file.exists()
        content = manager.settings_file.read_text()
        assert "[network]" in content
        assert "[system]" in content
        assert settings.log_level == "INFO"
        assert settings.assume_yes is False
        assert settings.network.retry_attempts == 3
        assert settings.directory.cache == tmp_path.resolve() / "cache"
        assert settings.system.opt == Path("/opt")

    def test_defaults_written_once(self, tmp_path):
        SettingsManager(tmp_path).load()
        content = (tmp_path / "settings.conf").read_text()

        lines = content.splitlines()
        assert lines.count("log_level = INFO") == 1
        assert content.count("retry_attempts") == 1

    def test_reads_overrides(self, tmp_path):
        (tmp_path / "settings.conf").write_text(
            "[DEFAULT]\n"
            "log_level = debug\n"
            "assume_yes = true  # skip prompts\n"
            "[network]\n"
            "retry_attempts = 5\n"
            "[directory]\n"
            "cache = ~/debapps-cache\n"
            "[system]\n"
            "opt = /srv/apps\n"
        )

        settings = SettingsManager(tmp_path).load()

        assert settings.log_level == "DEBUG"
        assert settings.assume_yes is True
        assert settings.network.retry_attempts == 5
        assert settings.network.timeout_seconds == 10
        assert settings.directory.cache == (
            Path("~/debapps-cache").expanduser().resolve()
        )
        assert settings.system.opt == Path("/srv/apps")
        assert settings.system.bin == Path("/usr/sbin")

    def test_invalid_number(self, tmp_path):
        (tmp_path / "settings.conf").write_text(
            "[network]\nretry_attempts = many\n"
        )

        with pytest.raises(ValueError):
            SettingsManager(tmp_path).load()


class TestPaths:
    """Test path helpers."""

    def test_ledger_path(self, tmp_path):
        assert Paths.get_ledger_path(tmp_path) == tmp_path / "installed.db"

    def test_ensure_directories(self, tmp_path):
        target = tmp_path / "a" / "b"
        Paths.ensure_directories(target)

        assert target.is_dir()

    def test_removal_roots(self):
        assert SystemPaths().removal_roots == (
            "/opt/",
            "/usr/share/",
            "/usr/sbin/",
        )
