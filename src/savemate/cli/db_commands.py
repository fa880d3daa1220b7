"""Database CLI commands."""

import typer

from .utils import console, get_database_service

db_app = typer.Typer(help="Database management commands")


@db_app.command("init")
def init_db() -> None:
    """Create all database tables."""
    database = get_database_service()
    try:
        database.create_all()
    finally:
        database.dispose()
    console.print("[green]Database initialized with tables.[/green]")
