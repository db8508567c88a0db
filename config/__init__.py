import os

SETTINGS_MODULES = {
    "development": "config.development",
    "dev": "config.development",
    "testing": "config.testing",
    "test": "config.testing",
    "production": "config.production",
    "prod": "config.production",
}


def get_settings_module(env: str | None = None) -> str:
    """Settings module for ``env`` (default: ``APP_ENV``); unknown names fall back to development."""
    name = (env if env is not None else os.getenv("APP_ENV", "development")).strip().lower()
    return SETTINGS_MODULES.get(name, SETTINGS_MODULES["development"])
