import logging

import pytest

from backend.config import COUNTER_ID, Settings, configure_logging
from backend.errors import ConfigError


def test_counter_id_is_fixed():
    assert COUNTER_ID == "visitor-count"


def test_from_env_reads_table_name():
    settings = Settings.from_env({"TABLE_NAME": " visitors ", "LOG_LEVEL": "debug"})
    assert settings.table_name == "visitors"
    assert settings.log_level == "DEBUG"


def test_from_env_defaults_to_os_environ(monkeypatch):
    monkeypatch.setenv("TABLE_NAME", "from-os")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = Settings.from_env()
    assert settings == Settings(table_name="from-os", log_level="INFO")


@pytest.mark.parametrize("env", [{}, {"TABLE_NAME": ""}, {"TABLE_NAME": "   "}])
def test_table_name_is_required(env):
    with pytest.raises(ConfigError, match="TABLE_NAME"):
        Settings.from_env(env)


def test_configure_logging_sets_package_level(monkeypatch):
    logger = logging.getLogger("backend")
    old = logger.level
    try:
        monkeypatch.setenv("LOG_LEVEL", "warning")
        configure_logging()
        assert logger.level == logging.WARNING
        configure_logging("DEBUG")
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(old)
