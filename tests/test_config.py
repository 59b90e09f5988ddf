"""
Tests for config.py - environment-driven configuration.
"""
import os
from pathlib import Path

import pytest

from config import Config, Environment, InstallerConfig, get_config, reset_config


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    for name in [
        "MODWIRE_MODULE_ROOTS",
        "MODWIRE_META_FILE",
        "MODWIRE_PAYLOAD_FILE",
        "MODWIRE_VERBOSE",
        "ENVIRONMENT",
        "DEBUG",
    ]:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestInstallerConfig:
    """Installer settings."""

    def test_defaults(self):
        config = InstallerConfig()

        assert config.module_roots == []
        assert config.meta_filename == "meta.py"
        assert config.payload_filename == "payload.py"
        assert config.verbose is False

    def test_module_roots_use_path_separator(self, monkeypatch):
        monkeypatch.setenv("MODWIRE_MODULE_ROOTS", os.pathsep.join(["app/modules", "vendor/modules", ""]))

        assert InstallerConfig().module_roots == [Path("app/modules"), Path("vendor/modules")]

    def test_file_names_and_verbose(self, monkeypatch):
        monkeypatch.setenv("MODWIRE_META_FILE", "module.py")
        monkeypatch.setenv("MODWIRE_PAYLOAD_FILE", "impl.py")
        monkeypatch.setenv("MODWIRE_VERBOSE", "TRUE")

        config = InstallerConfig()

        assert config.meta_filename == "module.py"
        assert config.payload_filename == "impl.py"
        assert config.verbose is True


class TestConfig:
    """Top-level configuration."""

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")

        config = Config()

        assert config.env == Environment.PRODUCTION
        assert config.is_production

    def test_unknown_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "moon")
        with pytest.raises(ValueError):
            Config()

    def test_to_dict(self, monkeypatch):
        monkeypatch.setenv("MODWIRE_MODULE_ROOTS", "modules")

        data = Config().to_dict()

        assert data == {
            "env": "development",
            "debug": False,
            "installer": {
                "module_roots": ["modules"],
                "meta_filename": "meta.py",
                "payload_filename": "payload.py",
                "verbose": False,
            },
        }

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reset_config_rereads_environment(self, monkeypatch):
        assert get_config().debug is False

        monkeypatch.setenv("DEBUG", "true")
        assert get_config().debug is False

        reset_config()
        assert get_config().debug is True
