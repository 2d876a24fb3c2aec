"""
Application State for CLI Commands.

One-shot commands open an AppState, restore the saved session, run, and
close the store connection again.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import typer
from rich.console import Console

from notekeep.backend.core.logging import get_logger, log_with_source
from notekeep.backend.main import AppState, create_app_state

logger = get_logger(__name__)
console = Console()


@asynccontextmanager
async def open_state(require_session: bool = True) -> AsyncIterator[AppState]:
    """
    Open an AppState for the duration of a command.

    Args:
        require_session: Exit with status 1 unless a saved session is valid.

    Raises:
        typer.Exit: When a session is required and none is valid
    """
    try:
        state = create_app_state()
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        status = await state.start()
        log_with_source(logger, "cli", "debug", "Session checked", phase=status.phase.value)
        if require_session and not status.authenticated:
            notice = status.notice or "Not signed in"
            console.print(f"[red]{notice}[/red]")
            console.print("[dim]Sign in with: cli.py auth signin[/dim]")
            raise typer.Exit(1)
        yield state
    finally:
        await state.close()
