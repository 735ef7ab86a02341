"""Command-line interface for MemeHustle."""

import asyncio
from typing import Optional

import typer
import uvicorn

from ..config.config import get_settings
from ..database.connection import DatabaseConnectionManager
from ..utils.logging import setup_logging

app = typer.Typer(help="MemeHustle realtime meme backend")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Listen port (default: PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the API and realtime server."""
    settings = get_settings()
    uvicorn.run(
        "meme_hustle.api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@app.command("init-db")
def init_db() -> None:
    """Create the memes and bids tables on the configured database."""
    settings = get_settings()
    setup_logging(
        level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file
    )
    db = DatabaseConnectionManager(settings.store_url)

    async def _init() -> None:
        try:
            await db.init_db()
        finally:
            await db.dispose()

    asyncio.run(_init())
    typer.echo("Database tables created (if they didn't exist).")


if __name__ == "__main__":
    app()
