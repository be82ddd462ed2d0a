from __future__ import annotations

import os
import warnings
from enum import StrEnum
from functools import cache
from typing import NamedTuple

ENV_VARS = ("DOCSCAN_ENV", "APP_ENV")


class Env(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


_ALIASES: dict[str, Env] = {
    "development": Env.DEV,
    "testing": Env.TEST,
    "ci": Env.TEST,
    "production": Env.PROD,
}


def parse_env(raw: str | None) -> Env | None:
    """Map a raw env string (or alias) to an Env; None when unrecognized."""
    if not raw:
        return None
    value = raw.strip().lower()
    try:
        return Env(value)
    except ValueError:
        return _ALIASES.get(value)


@cache
def get_env() -> Env:
    """
    Active deployment environment.

    Read once from DOCSCAN_ENV, then APP_ENV; defaults to local. An
    unrecognized value also falls back to local, with a RuntimeWarning.
    """
    raw = next((os.environ[name] for name in ENV_VARS if os.environ.get(name)), None)
    env = parse_env(raw)
    if env is not None:
        return env
    if raw:
        warnings.warn(
            f"Unrecognized environment '{raw}', defaulting to 'local'.",
            RuntimeWarning,
            stacklevel=2,
        )
    return Env.LOCAL


class EnvFlags(NamedTuple):
    env: Env
    is_local: bool
    is_dev: bool
    is_test: bool
    is_prod: bool


def get_env_flags(env: Env | None = None) -> EnvFlags:
    e = env or get_env()
    return EnvFlags(e, e is Env.LOCAL, e is Env.DEV, e is Env.TEST, e is Env.PROD)


ENV: Env = get_env()
