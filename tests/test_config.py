"""Tests for config.py -- environment settings and dotenv loading."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import call, patch

import pytest

from template_scanner.config import Settings, load_env_files
from template_scanner.errors import ConfigError

_BASE = {"REDIS_URL": "redis://localhost:6379/0"}


class TestSettingsFromEnv:
    def test_defaults(self) -> None:
        settings = Settings.from_env(_BASE)
        assert settings.redis_url == "redis://localhost:6379/0"
        assert settings.github_token is None
        assert settings.clone_timeout_ms == 30000
        assert settings.clone_timeout == 30.0
        assert settings.queue_concurrency == 3
        assert settings.queue_name == "template-scan"
        assert settings.scan_batch_size == 10
        assert settings.log_level == "INFO"

    def test_missing_redis_url_raises(self) -> None:
        with pytest.raises(ConfigError, match="REDIS_URL"):
            Settings.from_env({})

    def test_blank_redis_url_raises(self) -> None:
        with pytest.raises(ConfigError):
            Settings.from_env({"REDIS_URL": "   "})

    def test_all_options_read(self) -> None:
        settings = Settings.from_env(
            {
                **_BASE,
                "GITHUB_TOKEN": "ghp_abc",
                "TEMP_DIR": "/scratch",
                "CLONE_TIMEOUT": "45000",
                "QUEUE_CONCURRENCY": "8",
                "QUEUE_NAME": "scans",
                "SUPABASE_URL": "https://db.example.co/",
                "SUPABASE_SERVICE_ROLE_KEY": "service-key",
                "SCAN_BATCH_SIZE": "25",
                "LOG_LEVEL": "debug",
            }
        )
        assert settings.github_token == "ghp_abc"
        assert settings.temp_dir == "/scratch"
        assert settings.clone_timeout == 45.0
        assert settings.queue_concurrency == 8
        assert settings.queue_name == "scans"
        assert settings.supabase_url == "https://db.example.co"
        assert settings.supabase_key == "service-key"
        assert settings.scan_batch_size == 25
        assert settings.log_level == "DEBUG"

    def test_non_integer_option_raises(self) -> None:
        with pytest.raises(ConfigError, match="CLONE_TIMEOUT"):
            Settings.from_env({**_BASE, "CLONE_TIMEOUT": "soon"})

    def test_non_positive_option_raises(self) -> None:
        with pytest.raises(ConfigError, match="QUEUE_CONCURRENCY"):
            Settings.from_env({**_BASE, "QUEUE_CONCURRENCY": "0"})

    def test_unknown_log_level_raises(self) -> None:
        with pytest.raises(ConfigError, match="LOG_LEVEL"):
            Settings.from_env({**_BASE, "LOG_LEVEL": "chatty"})


class TestLoadEnvFiles:
    def test_local_file_loaded_before_shared_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env.local").write_text("A=1\n")
        (tmp_path / ".env").write_text("A=2\n")

        with patch("template_scanner.config.load_dotenv") as mock_load:
            load_env_files(tmp_path)

        assert mock_load.call_args_list == [
            call(tmp_path / ".env.local", override=False),
            call(tmp_path / ".env", override=False),
        ]

    def test_missing_files_are_skipped(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("A=2\n")

        with patch("template_scanner.config.load_dotenv") as mock_load:
            load_env_files(tmp_path)

        mock_load.assert_called_once_with(tmp_path / ".env", override=False)

    def test_values_do_not_override_environment(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("TS_TEST_VALUE", "from-shell")
        (tmp_path / ".env").write_text("TS_TEST_VALUE=from-file\n")

        load_env_files(tmp_path)

        assert os.environ["TS_TEST_VALUE"] == "from-shell"
