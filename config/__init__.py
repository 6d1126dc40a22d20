import os
from typing import Optional

SETTINGS_MODULES = {
    "development": "config.development",
    "production": "config.production",
    "testing": "config.testing",
}

_ALIASES = {"dev": "development", "prod": "production", "test": "testing"}


def resolve_env(value: Optional[str] = None) -> str:
    """Normalize an environment name; unknown names fall back to development."""
    env = os.getenv("APP_ENV", "development") if value is None else value
    env = _ALIASES.get(env.strip().lower(), env.strip().lower())
    return env if env in SETTINGS_MODULES else "development"


def get_settings_module(env: Optional[str] = None) -> str:
    # An explicit env argument wins over ATTENDANCE_SETTINGS, which wins over APP_ENV.
    if env is None and os.getenv("ATTENDANCE_SETTINGS"):
        return os.environ["ATTENDANCE_SETTINGS"]
    return SETTINGS_MODULES[resolve_env(env)]
