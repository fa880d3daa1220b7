"""Category seeding CLI commands."""

import typer
from rich.table import Table
from sqlalchemy.exc import IntegrityError

from src.savemate.entities.service.category import Category, CategoryRepository

from .utils import console, get_database_service

categories_app = typer.Typer(help="Manage deal categories")


@categories_app.command("add")
def add_category(
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    slug: str = typer.Option(..., "--slug", "-s", help="Kebab-case slug"),
) -> None:
    """Add a category."""
    try:
        category = Category(name=name.strip(), slug=slug)
    except ValueError as e:
        console.print(f"[red]❌ Invalid category: {e}[/red]")
        raise typer.Exit(code=1) from e

    database = get_database_service()
    try:
        with database.session_scope() as session:
            created = CategoryRepository(session).create(category)
    except IntegrityError as e:
        console.print(f"[red]❌ Category name or slug already exists: {slug}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database.dispose()

    console.print(f"[green]✅ Added category {created.name} ({created.slug})[/green]")


@categories_app.command("list")
def list_categories() -> None:
    """List all categories."""
    database = get_database_service()
    try:
        with database.session_scope() as session:
            categories = CategoryRepository(session).list_all()
    finally:
        database.dispose()

    if not categories:
        console.print("[yellow]No categories found[/yellow]")
        return

    table = Table(title="Categories")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Slug", style="blue")
    for category in categories:
        table.add_row(category.id, category.name, category.slug)
    console.print(table)
