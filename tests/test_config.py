import logging

import pytest

from u2fserver import config


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("yes", True), ("on", True), ("0", False), ("off", False), ("", False), (" No ", False)],
)
def test_env_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("U2FSERVER_TEST_FLAG", raw)

    assert config._env_flag("U2FSERVER_TEST_FLAG") is expected


def test_env_flag_unset(monkeypatch):
    monkeypatch.delenv("U2FSERVER_TEST_FLAG", raising=False)

    assert config._env_flag("U2FSERVER_TEST_FLAG") is None


def test_load_settings_defaults(monkeypatch):
    monkeypatch.delenv("U2FSERVER_STRICT_JSON", raising=False)
    monkeypatch.delenv("U2FSERVER_LOG_LEVEL", raising=False)

    assert config.load_settings() == config.Settings(
        strict_json=False, log_level=logging.INFO
    )


@pytest.mark.parametrize(
    "raw, level",
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("15", 15), ("chatty", logging.INFO)],
)
def test_load_settings_from_environment(monkeypatch, raw, level):
    monkeypatch.setenv("U2FSERVER_STRICT_JSON", "true")
    monkeypatch.setenv("U2FSERVER_LOG_LEVEL", raw)

    settings = config.load_settings()

    assert settings.strict_json is True
    assert settings.log_level == level
