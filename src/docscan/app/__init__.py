from .core.env import ENV as CURRENT_ENVIRONMENT
from .core.env import Env, get_env, get_env_flags
from .core.logging import setup_logging
from .settings import AppSettings, get_app_settings

__all__ = [
    "CURRENT_ENVIRONMENT",
    "Env",
    "get_env",
    "get_env_flags",
    "setup_logging",
    "AppSettings",
    "get_app_settings",
]
