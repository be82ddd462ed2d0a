from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import Optional, Set

from fastapi import FastAPI

from docscan.app.core.env import Env, get_env

logger = logging.getLogger(__name__)


def _should_skip_module(module_name: str, exclude_segments: Set[str]) -> bool:
    parts = module_name.split(".")
    if parts[-1].startswith("_"):
        return True
    return any(seg in exclude_segments for seg in parts)


def register_all_routers(
        app: FastAPI,
        *,
        base_package: Optional[str] = None,
        prefix: str = "",
        exclude: Optional[dict[Env | str, set[str]]] = None,
        env: Optional[Env | str] = None,
) -> None:
    """
    Discover and include every module-level ``router`` under a package.

    - Modules whose final segment starts with '_' are skipped.
    - ``exclude`` maps an Env (or "all") to path segments skipped in that env.
    - A module may set ROUTER_PREFIX, ROUTER_TAG and INCLUDE_ROUTER_IN_SCHEMA.
    - Import errors propagate: a broken router module must fail startup.
    """
    base_package = base_package or __name__
    package_module: ModuleType = importlib.import_module(base_package)
    if not hasattr(package_module, "__path__"):
        raise RuntimeError(f"Provided base_package '{base_package}' is not a package (no __path__).")

    env = get_env() if env is None else Env(env)
    exclude_set: Set[str] = set()
    for key, segments in (exclude or {}).items():
        if key == "all" or Env(key) == env:
            exclude_set.update(segments)

    for _, module_name, _ in pkgutil.walk_packages(
            package_module.__path__, prefix=f"{base_package}."
    ):
        if _should_skip_module(module_name, exclude_set):
            logger.debug("Skipping router module: %s", module_name)
            continue
        module = importlib.import_module(module_name)
        router = getattr(module, "router", None)
        if router is None:
            continue
        include_kwargs: dict = {
            "prefix": prefix.rstrip("/") + getattr(module, "ROUTER_PREFIX", ""),
            "include_in_schema": getattr(module, "INCLUDE_ROUTER_IN_SCHEMA", True),
        }
        router_tag = getattr(module, "ROUTER_TAG", None)
        if router_tag:
            include_kwargs["tags"] = [router_tag]
        app.include_router(router, **include_kwargs)
        logger.debug(
            "Included router from module: %s (prefix=%s, tag=%s)",
            module_name, include_kwargs["prefix"], router_tag,
        )
