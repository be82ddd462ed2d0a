"""Tests for the docscan CLI."""

from __future__ import annotations

from unittest.mock import patch

from typer.testing import CliRunner

from docscan.app.core.env import get_env
from docscan.cli import app

runner = CliRunner()


class TestServe:
    def test_runs_app_factory(self):
        with patch("uvicorn.run") as run, patch("docscan.cli.setup_logging") as setup:
            result = runner.invoke(app, ["serve", "--host", "0.0.0.0", "--port", "9000"])

        assert result.exit_code == 0, result.output
        setup.assert_called_once_with(level=None)
        run.assert_called_once()
        args, kwargs = run.call_args
        assert args == ("docscan.api:create_app",)
        assert kwargs["factory"] is True
        assert (kwargs["host"], kwargs["port"]) == ("0.0.0.0", 9000)


class TestInitDb:
    def test_creates_tables(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'docs.db'}"

        with patch("docscan.cli.setup_logging"):
            result = runner.invoke(app, ["init-db", "--database-url", url])

        assert result.exit_code == 0, result.output
        assert "documents table ready" in result.output
        assert (tmp_path / "docs.db").exists()

    def test_local_default_is_sqlite_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for name in ("DB_DATABASE_URL", "DATABASE_URL", "DOCSCAN_ENV", "APP_ENV"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("DB_SQLITE_PATH", "local.db")
        get_env.cache_clear()

        try:
            with patch("docscan.cli.setup_logging"):
                result = runner.invoke(app, ["init-db"])
        finally:
            get_env.cache_clear()

        assert result.exit_code == 0, result.output
        assert (tmp_path / "local.db").exists()

    def test_prod_requires_database_url(self, monkeypatch):
        monkeypatch.delenv("DB_DATABASE_URL", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("DOCSCAN_ENV", "prod")
        get_env.cache_clear()

        try:
            with patch("docscan.cli.setup_logging"):
                result = runner.invoke(app, ["init-db"])
        finally:
            get_env.cache_clear()

        assert result.exit_code == 2
