"""
Display Helpers.

Rich rendering shared by the commands and the interactive shell.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from notekeep.backend.core.utils import format_timestamp
from notekeep.backend.schemas.base import OperationResult
from notekeep.backend.schemas.note import Note
from notekeep.backend.schemas.profile import Profile
from notekeep.backend.services.edit_session import EditSession

ERROR_TITLES = {
    "VAL_VALIDATION_ERROR": "Validation Error",
    "RES_NOT_FOUND": "Not Found",
    "AUTH_UNAUTHORIZED": "Authentication Error",
    "RES_STALE": "Superseded",
    "SYS_REMOTE_TIMEOUT": "Timed Out",
}


def print_error(console: Console, result: OperationResult) -> None:
    """Print the error of a failed result."""
    error = result.error
    if error is None:
        return
    title = ERROR_TITLES.get(error.code, "Request Failed")
    console.print(f"[red]{title}:[/red] {error.message}")


def notes_table(notes: list[Note], title: str = "Notes") -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="cyan")
    table.add_column("Content")
    table.add_column("Created")
    table.add_column("Updated")

    for note in notes:
        content = note.content if len(note.content) <= 60 else note.content[:57] + "..."
        updated = "" if note.updated_at == note.created_at else format_timestamp(note.updated_at)
        table.add_row(note.id, note.title, content, format_timestamp(note.created_at), updated)
    return table


def print_notes(console: Console, notes: list[Note], term: str = "") -> None:
    if notes:
        title = f"Notes matching '{term}'" if term else "Notes"
        console.print(notes_table(notes, title=title))
        console.print(f"[dim]{len(notes)} note(s)[/dim]")
    elif term:
        console.print("[dim]No notes match your search.[/dim]")
    else:
        console.print("[dim]No notes yet. Create your first note to get started.[/dim]")


def print_profile(console: Console, profile: Profile) -> None:
    lines = [f"[bold]{profile.full_name}[/bold]", profile.email]
    if profile.phone:
        lines.append(profile.phone)
    console.print(Panel("\n".join(lines), title="Signed in as"))


def print_edit_session(console: Console, session: EditSession) -> None:
    if session.is_idle:
        console.print("[dim]No note open.[/dim]")
        return
    heading = "New note" if session.editing_id is None else f"Editing {session.editing_id}"
    draft = session.draft
    console.print(Panel(
        f"[cyan]Title:[/cyan] {draft.title}\n[cyan]Content:[/cyan] {draft.content}",
        title=heading,
    ))
