"""
Note Commands.

List, search, create, edit and delete notes of the signed-in user.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console

from notekeep.cli.client import open_state
from notekeep.cli.display import notes_table, print_error, print_notes

app = typer.Typer(help="Note commands")
console = Console()


@app.command("list")
def list_notes(
    search: str = typer.Option("", "--search", "-s", help="Only notes whose title or content contains this"),
) -> None:
    """
    List your notes, newest first.

    Examples:
        cli.py notes list
        cli.py notes list -s groceries
    """
    asyncio.run(_list(search))


async def _list(search: str) -> None:
    async with open_state() as state:
        print_notes(console, state.notes.search(search), term=search)


@app.command()
def add(
    title: str = typer.Argument(..., help="Note title"),
    content: str = typer.Argument(..., help="Note content"),
) -> None:
    """Create a note."""
    asyncio.run(_add(title, content))


async def _add(title: str, content: str) -> None:
    async with open_state() as state:
        result = await state.notes.create(title, content)
        if not result.success:
            print_error(console, result)
            raise typer.Exit(1)
        console.print("[green]Note created.[/green]")
        console.print(notes_table([result.data], title="Created"))


@app.command()
def edit(
    note_id: str = typer.Argument(..., help="ID of the note to edit"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="New content"),
) -> None:
    """Change the title and/or content of a note."""
    if title is None and content is None:
        console.print("[red]Nothing to change: pass --title and/or --content[/red]")
        raise typer.Exit(1)
    asyncio.run(_edit(note_id, title, content))


async def _edit(note_id: str, title: str | None, content: str | None) -> None:
    async with open_state() as state:
        opened = state.notes.begin_edit(note_id)
        if not opened.success:
            print_error(console, opened)
            raise typer.Exit(1)
        state.edit_session.update_draft(title=title, content=content)
        result = await state.notes.submit()
        if not result.success:
            print_error(console, result)
            raise typer.Exit(1)
        console.print("[green]Note updated.[/green]")
        console.print(notes_table([result.data], title="Updated"))


@app.command()
def delete(
    note_id: str = typer.Argument(..., help="ID of the note to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a note."""
    if not yes:
        typer.confirm(f"Delete note {note_id}?", abort=True)
    asyncio.run(_delete(note_id))


async def _delete(note_id: str) -> None:
    async with open_state() as state:
        result = await state.notes.delete(note_id)
        if not result.success:
            print_error(console, result)
            raise typer.Exit(1)
        console.print("[green]Note deleted.[/green]")
