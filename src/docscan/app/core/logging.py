from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from traceback import format_exception

from docscan.app.core.env import get_env_flags

# extra= attribute name -> key inside the JSON payload section
HTTP_FIELDS = {"http_method": "method", "path": "path", "status_code": "status"}
DOCUMENT_FIELDS = ("user_id", "document_id", "file_path", "document_type")

PLAIN_FORMAT = "%(asctime)s %(levelname)-5s [pid:%(process)d] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _section(record: logging.LogRecord, fields: dict[str, str]) -> dict[str, object]:
    return {
        key: getattr(record, attr)
        for attr, key in fields.items()
        if getattr(record, attr, None) is not None
    }


def _error(exc_info) -> dict[str, object]:
    exc_type, exc, tb = exc_info
    stack = "".join(format_exception(exc_type, exc, tb))
    limit = int(os.getenv("LOG_STACK_LIMIT", "4000"))
    if len(stack) > limit:
        stack = stack[:limit] + "...(truncated)"
    err: dict[str, object] = {"stack": stack}
    if exc_type is not None:
        err["type"] = exc_type.__name__
    if exc is not None and str(exc):
        err["message"] = str(exc)
    return err


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for prod and CI log shipping.

    Request context (``http_method``, ``path``, ``status_code``) lands under
    ``http`` and document context (``user_id``, ``document_id``,
    ``file_path``, ``document_type``) under ``document``.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }
        http = _section(record, HTTP_FIELDS)
        if http:
            payload["http"] = http
        document = _section(record, {name: name for name in DOCUMENT_FIELDS})
        if document:
            payload["document"] = document
        if record.exc_info:
            payload["error"] = _error(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def default_level() -> str:
    if os.getenv("LOG_LEVEL"):
        return os.environ["LOG_LEVEL"].upper()
    return "INFO" if get_env_flags().is_prod else "DEBUG"


def default_format() -> str:
    if os.getenv("LOG_FORMAT"):
        return os.environ["LOG_FORMAT"].lower()
    return "json" if get_env_flags().is_prod else "plain"


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure the root logger; LOG_LEVEL / LOG_FORMAT override the env defaults."""
    level = (level or default_level()).upper()
    formatter = "json" if (fmt or default_format()).lower() == "json" else "plain"

    # uvicorn keeps no handlers of its own so its records reach the root handler
    propagated = {
        name: {"level": lvl, "handlers": [], "propagate": True}
        for name, lvl in [
            ("uvicorn", "INFO"),
            ("uvicorn.error", "INFO"),
            ("uvicorn.access", "INFO"),
            ("sqlalchemy.engine", "WARNING"),
            ("botocore", "WARNING"),
            ("aiobotocore", "WARNING"),
        ]
    }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {"format": PLAIN_FORMAT, "datefmt": DATE_FORMAT},
                "json": {"()": JsonFormatter, "datefmt": DATE_FORMAT},
            },
            "handlers": {
                "stream": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": formatter,
                }
            },
            "root": {"level": level, "handlers": ["stream"]},
            "loggers": propagated,
        }
    )
