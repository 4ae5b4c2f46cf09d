"""
Tests for the settings and logging configuration modules.
"""

import logging
import os
from unittest.mock import patch

import pytest

from almanac.core import logging_config
from almanac.core.settings import (
    DEFAULT_LOG_FILE,
    get_database_path,
    get_log_dir,
    get_log_filename,
    get_user_data_path,
    is_debug,
    load_settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "ALMANAC_DATABASE",
        "ALMANAC_LOG_DIR",
        "ALMANAC_LOG_FILE",
        "ALMANAC_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


def test_get_user_data_path_with_filename(tmp_path, monkeypatch):
    """Test get_user_data_path creates the directory and appends the file."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))

    with patch("almanac.core.settings.sys.platform", "linux"):
        result = get_user_data_path("test.almanac")

    assert result == str(tmp_path / "Almanac" / "test.almanac")
    assert os.path.isdir(tmp_path / "Almanac")


def test_database_path_override_wins(clean_env, monkeypatch):
    monkeypatch.setenv("ALMANAC_DATABASE", "from-env.almanac")

    assert get_database_path("explicit.almanac") == "explicit.almanac"
    assert get_database_path() == "from-env.almanac"


def test_log_settings_defaults(clean_env):
    assert get_log_dir() == "logs"
    assert get_log_filename() == DEFAULT_LOG_FILE
    assert not is_debug()


@pytest.mark.parametrize("value,expected", [("1", True), ("TRUE", True), ("no", False)])
def test_is_debug(clean_env, monkeypatch, value, expected):
    monkeypatch.setenv("ALMANAC_DEBUG", value)

    assert is_debug() is expected


def test_load_settings_reads_dotenv(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("ALMANAC_LOG_FILE=custom.log\n")

    try:
        assert load_settings(str(env_file))
        assert get_log_filename() == "custom.log"
    finally:
        os.environ.pop("ALMANAC_LOG_FILE", None)


def test_load_settings_does_not_override(clean_env, monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("ALMANAC_LOG_DIR=from-file\n")
    monkeypatch.setenv("ALMANAC_LOG_DIR", "from-shell")

    load_settings(str(env_file))

    assert get_log_dir() == "from-shell"


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        level = root.level
        yield
        for handler in list(root.handlers):
            if isinstance(handler, logging_config.SafeRotatingFileHandler) or (
                type(handler) is logging.StreamHandler
            ):
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)

    def test_configures_file_and_console(self, tmp_path, clean_env):
        logging_config.setup_logging(debug_mode=False, log_dir=str(tmp_path))

        root = logging.getLogger()
        kinds = {type(h) for h in root.handlers}
        assert logging_config.SafeRotatingFileHandler in kinds
        assert logging.StreamHandler in kinds
        assert root.level == logging.INFO

    def test_debug_mode(self, tmp_path, clean_env):
        logging_config.setup_logging(debug_mode=True, log_to_console=False, log_dir=str(tmp_path))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_writes_to_log_file(self, tmp_path, clean_env):
        logging_config.setup_logging(log_to_console=False, log_dir=str(tmp_path))

        logging.getLogger("almanac.test").info("hello log")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "hello log" in (tmp_path / DEFAULT_LOG_FILE).read_text()

    def test_repeated_setup_replaces_handlers(self, tmp_path, clean_env):
        logging_config.setup_logging(log_dir=str(tmp_path))
        logging_config.setup_logging(log_dir=str(tmp_path))

        assert len(logging.getLogger().handlers) == 2
