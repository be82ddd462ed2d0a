"""Tests for logging setup and the JSON formatter."""

from __future__ import annotations

import json
import logging
import sys

from docscan.app.core.logging import JsonFormatter, setup_logging


def _record(msg: str = "Uploaded %s", *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="docscan.documents.upload",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args or ("a.pdf",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_base_fields(self):
        payload = json.loads(JsonFormatter().format(_record()))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "docscan.documents.upload"
        assert payload["message"] == "Uploaded a.pdf"
        assert "document" not in payload
        assert "http" not in payload

    def test_document_context(self):
        record = _record(user_id="u1", document_id="d1", file_path="u1/1-a.pdf")

        payload = json.loads(JsonFormatter().format(record))

        assert payload["document"] == {"user_id": "u1", "document_id": "d1", "file_path": "u1/1-a.pdf"}

    def test_http_context(self):
        record = _record(http_method="POST", path="/documents", status_code=409)

        payload = json.loads(JsonFormatter().format(record))

        assert payload["http"] == {"method": "POST", "path": "/documents", "status": 409}

    def test_exception(self):
        try:
            raise RuntimeError("bucket gone")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        payload = json.loads(JsonFormatter().format(record))

        assert payload["error"]["type"] == "RuntimeError"
        assert payload["error"]["message"] == "bucket gone"
        assert "Traceback" in payload["error"]["stack"]


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_format(self):
        setup_logging(level="warning", fmt="json")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)

    def test_plain_format_quiets_sql_echo(self):
        setup_logging(level="debug", fmt="plain")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
