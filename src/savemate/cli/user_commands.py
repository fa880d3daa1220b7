"""User management CLI commands."""

import typer

from src.savemate.core.errors import Conflict, ValidationError
from src.savemate.core.models.identity import Role
from src.savemate.core.services import AuthService, TokenService
from src.savemate.core.storage import InMemoryResetTokenStore
from src.savemate.runtime.context import get_config

from .utils import console, get_database_service

users_app = typer.Typer(help="Manage user accounts")


@users_app.command("create-admin")
def create_admin(
    email: str = typer.Option(..., "--email", "-e", help="Email address"),
    password: str = typer.Option(
        ..., "--password", "-p", help="Password (8-72 characters)", prompt=True, hide_input=True
    ),
) -> None:
    """Create an ADMIN account. Public registration cannot create administrators."""
    config = get_config()
    tokens = TokenService(
        config.jwt,
        config.password_reset,
        InMemoryResetTokenStore(config.password_reset.ttl_seconds),
    )
    database = get_database_service()
    try:
        with database.session_scope() as session:
            user = AuthService(session, tokens).create_user(email, password, Role.ADMIN)
    except Conflict as e:
        console.print(f"[red]❌ {e.message}: {email}[/red]")
        raise typer.Exit(code=1) from e
    except ValidationError as e:
        for messages in e.details["fieldErrors"].values():
            console.print(f"[red]❌ {'; '.join(messages)}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database.dispose()

    console.print(f"[green]✅ Created administrator {user.email} ({user.id})[/green]")
