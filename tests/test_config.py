"""Unit tests for configuration resolution"""

import stat

import pytest

from mobcraft_storage.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    StorageConfig,
    load_config_file,
    save_config_file,
)
from mobcraft_storage.exceptions import AuthenticationError


class TestStorageConfig:
    def test_defaults(self):
        config = StorageConfig(api_key="k")

        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == DEFAULT_TIMEOUT

    def test_environment_fallback(self, monkeypatch):
        monkeypatch.setenv("MOBCRAFT_API_KEY", "env_key")
        monkeypatch.setenv("MOBCRAFT_BASE_URL", "https://env.mobcraft.in/")
        monkeypatch.setenv("MOBCRAFT_TIMEOUT", "7.5")

        config = StorageConfig.from_env()

        assert config.api_key == "env_key"
        assert config.base_url == "https://env.mobcraft.in"
        assert config.timeout == 7.5

    def test_explicit_values_win(self, monkeypatch):
        monkeypatch.setenv("MOBCRAFT_API_KEY", "env_key")
        monkeypatch.setenv("MOBCRAFT_BASE_URL", "https://env.mobcraft.in")
        monkeypatch.setenv("MOBCRAFT_TIMEOUT", "7.5")

        config = StorageConfig.resolve(api_key="arg_key", base_url="https://arg.mobcraft.in", timeout=3)

        assert config.api_key == "arg_key"
        assert config.base_url == "https://arg.mobcraft.in"
        assert config.timeout == 3.0

    def test_missing_api_key(self):
        with pytest.raises(AuthenticationError) as exc_info:
            StorageConfig.resolve()

        assert "MOBCRAFT_API_KEY" in exc_info.value.message

    @pytest.mark.parametrize("timeout", ["soon", 0, -1, "nan", "inf", float("inf")])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(ValueError):
            StorageConfig(api_key="k", timeout=timeout)

    def test_invalid_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("MOBCRAFT_TIMEOUT", "abc")

        with pytest.raises(ValueError):
            StorageConfig.resolve(api_key="k")

    def test_repr_masks_api_key(self):
        config = StorageConfig(api_key="super_secret")

        assert "super_secret" not in repr(config)
        assert "***" in repr(config)

    def test_is_immutable(self):
        config = StorageConfig(api_key="k")

        with pytest.raises(AttributeError):
            config.api_key = "other"


class TestConfigFile:
    def test_missing_file_is_empty(self, tmp_path):
        assert load_config_file(tmp_path / "nope.json") == {}

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"

        save_config_file({"api_key": "k", "base_url": "https://x"}, path)

        assert load_config_file(path) == {"api_key": "k", "base_url": "https://x"}
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_unusable_file_is_empty(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content)

        assert load_config_file(path) == {}
