"""Shared utilities for CLI commands."""

from rich.console import Console

from src.savemate.core.services import DbSessionService
from src.savemate.runtime.context import get_config

# Initialize Rich console for colored output
console = Console()


def get_database_service() -> DbSessionService:
    return DbSessionService(get_config())
