from __future__ import annotations

import asyncio
from typing import Optional

import typer

from docscan.app.core.logging import setup_logging

app = typer.Typer(help="DocScan service commands")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to bind."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes (local only)."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides env LOG_LEVEL."),
):
    """Run the documents API under uvicorn."""
    import uvicorn

    setup_logging(level=log_level)
    uvicorn.run(
        "docscan.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@app.command("init-db")
def init_db(
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="Overrides env DB_DATABASE_URL for this command."
    ),
):
    """Create the documents table in the configured SQL database."""
    from docscan.db.engine import DBEngine
    from docscan.db.settings import DBSettings

    setup_logging()
    settings = DBSettings(database_url=database_url) if database_url else DBSettings()
    try:
        engine = DBEngine(settings)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)

    async def _run() -> None:
        try:
            await engine.create_all()
        finally:
            await engine.dispose()

    asyncio.run(_run())
    typer.echo("documents table ready")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
