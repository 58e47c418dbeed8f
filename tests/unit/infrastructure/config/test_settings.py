import logging
import sys
from pathlib import Path

import pytest

from feedstore.infrastructure.config import settings
from feedstore.infrastructure.monitoring.logger_setup import resolve_log_level, setup_logging


@pytest.fixture
def fresh_settings():
    """Reload configuration from scratch around each test."""
    settings.reset_configuration()
    yield settings
    settings.reset_configuration()


def test_yaml_sections_become_dotted_keys(fresh_settings, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_file = tmp_path / "config.yaml"
    config_file.write_text("store:\n  backend: diskcache\n  location: /tmp/feeds\nlogging:\n  level: DEBUG\n")

    fresh_settings.load_configuration(config_file=config_file)

    assert fresh_settings.get_config("store.backend") == "diskcache"
    assert fresh_settings.get_config("logging.level") == "DEBUG"
    assert fresh_settings.get_store_location() == Path("/tmp/feeds")


def test_environment_overrides_yaml(fresh_settings, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_file = tmp_path / "config.yaml"
    config_file.write_text("store:\n  backend: diskcache\n")
    monkeypatch.setenv("FEEDSTORE_STORE_BACKEND", "memory")

    fresh_settings.load_configuration(config_file=config_file)

    assert fresh_settings.get_store_backend() == "memory"


def test_dotenv_file_is_loaded(fresh_settings, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    # Register the variable so whatever .env sets is undone afterwards
    monkeypatch.setenv("FEEDSTORE_STORE_RETRIES", "unset")
    monkeypatch.delenv("FEEDSTORE_STORE_RETRIES")
    (tmp_path / ".env").write_text("FEEDSTORE_STORE_RETRIES=3\n")

    fresh_settings.load_configuration(config_file=tmp_path / "missing.yaml")

    assert fresh_settings.get_config("store.retries") == 3


@pytest.mark.parametrize("raw, expected", [("true", True), ("False", False), ("12", 12), ("0.5", 0.5), ("file", "file")])
def test_environment_values_are_coerced(monkeypatch, raw, expected):
    monkeypatch.setenv("FEEDSTORE_SOME_KEY", raw)
    assert settings.get_config("some.key") == expected


def test_test_overrides_win(monkeypatch):
    monkeypatch.setenv("FEEDSTORE_STORE_BACKEND", "file")
    settings.set_config_for_testing({"store.backend": "memory"})

    assert settings.get_store_backend() == "memory"

    settings.clear_test_config()
    assert settings.get_store_backend() == "file"


def test_env_var_name():
    assert settings.env_var_name("store.location") == "FEEDSTORE_STORE_LOCATION"


@pytest.mark.parametrize("level, expected", [("debug", logging.DEBUG), ("WARNING", logging.WARNING), (logging.ERROR, logging.ERROR), ("nonsense", logging.INFO), ("basic_format", logging.INFO), ("root", logging.INFO)])
def test_resolve_log_level(level, expected):
    assert resolve_log_level(level) == expected


def test_setup_logging_adds_file_handler(tmp_path):
    log_file = tmp_path / "feedstore.log"
    root_logger = logging.getLogger()
    saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
    try:
        setup_logging(log_level="DEBUG", log_file=str(log_file))
        logging.getLogger("feedstore.test").debug("written to file")

        assert root_logger.level == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in root_logger.handlers)
        for handler in root_logger.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()
    finally:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(saved_level)


def test_setup_logging_console_handler_writes_to_stderr():
    root_logger = logging.getLogger()
    saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
    try:
        setup_logging(log_level="basic_format")

        assert root_logger.level == logging.INFO
        assert [type(h) for h in root_logger.handlers] == [logging.StreamHandler]
        assert root_logger.handlers[0].stream is sys.stderr
    finally:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        for handler in saved_handlers:
            root_logger.addHandler(handler)
        root_logger.setLevel(saved_level)
