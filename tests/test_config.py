import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env, expected",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        (" test ", "config.testing"),
        ("staging", "config.development"),
        ("", "config.development"),
    ],
)
def test_settings_module_by_name(env, expected):
    assert get_settings_module(env) == expected


def test_settings_module_reads_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    assert get_settings_module() == "config.testing"

    monkeypatch.delenv("APP_ENV")
    assert get_settings_module() == "config.development"
