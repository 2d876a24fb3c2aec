"""
Interactive Shell Mode.

REPL that keeps one AppState for its whole lifetime, so the note list and
the open create/edit form persist between commands. Draft text typed with
`title` and `content` is buffered in the edit session and only sent to
the store on `save`.
"""

import shlex
from collections.abc import Awaitable, Callable

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from notekeep.backend.core.exceptions import ConflictError
from notekeep.backend.core.logging import get_logger, log_with_source
from notekeep.backend.main import AppState, create_app_state
from notekeep.cli.display import print_edit_session, print_error, print_notes, print_profile

logger = get_logger(__name__)
console = Console()


class InteractiveShell:
    """
    Interactive shell for the notes application.

    Usage:
        shell = InteractiveShell(create_app_state())
        await shell.run()
    """

    def __init__(self, state: AppState) -> None:
        self.state = state
        self.running = False
        self.search_term = ""
        self.commands: dict[str, Callable[[list[str]], Awaitable[None]]] = {
            "help": self._cmd_help,
            "list": self._cmd_list,
            "search": self._cmd_search,
            "new": self._cmd_new,
            "edit": self._cmd_edit,
            "title": self._cmd_title,
            "content": self._cmd_content,
            "show": self._cmd_show,
            "save": self._cmd_save,
            "cancel": self._cmd_cancel,
            "delete": self._cmd_delete,
            "reload": self._cmd_reload,
            "whoami": self._cmd_whoami,
            "signout": self._cmd_signout,
            "clear": self._cmd_clear,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }

    async def run(self) -> None:
        """Run the interactive shell."""
        status = await self.state.start()
        if not status.authenticated:
            console.print(f"[red]{status.notice or 'Not signed in'}[/red]")
            console.print("[dim]Sign in with: cli.py auth signin[/dim]")
            return

        self.running = True
        console.print(Panel(
            f"[bold]Welcome back, {status.profile.full_name}![/bold]\n"
            "Type [cyan]help[/cyan] for available commands, [cyan]quit[/cyan] to exit.",
            title="NoteKeep",
        ))
        await self._cmd_list([])

        while self.running:
            try:
                user_input = console.input("[bold cyan]notes>[/bold cyan] ").strip()
            except KeyboardInterrupt:
                console.print("\n[dim]Use 'quit' to exit[/dim]")
                continue
            except EOFError:
                break
            if user_input:
                await self.execute(user_input)

        console.print("[dim]Goodbye![/dim]")

    async def execute(self, line: str) -> None:
        """Parse and run a single shell line."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            return
        if not parts:
            return

        command, args = parts[0].lower(), parts[1:]
        log_with_source(logger, "shell", "debug", "Shell command", command=command)
        handler = self.commands.get(command)
        if handler is None:
            console.print(f"[red]Unknown command: {command}[/red]")
            console.print("Type [cyan]help[/cyan] for available commands.")
            return
        await handler(args)

    async def _cmd_help(self, args: list[str]) -> None:
        """Display help information."""
        table = Table(title="Available Commands", show_header=True)
        table.add_column("Command", style="cyan")
        table.add_column("Description")

        table.add_row("list", "Show notes (filtered by the current search)")
        table.add_row("search <term>", "Filter notes by title or content; no term clears")
        table.add_row("new", "Start a new note")
        table.add_row("edit <id>", "Edit an existing note")
        table.add_row("title <text>", "Set the title of the open note")
        table.add_row("content <text>", "Set the content of the open note")
        table.add_row("show", "Show the open note")
        table.add_row("save", "Save the open note")
        table.add_row("cancel", "Discard the open note")
        table.add_row("delete <id>", "Delete a note")
        table.add_row("reload", "Reload notes from the store")
        table.add_row("whoami", "Show your profile")
        table.add_row("signout", "Sign out and leave the shell")
        table.add_row("clear", "Clear the screen")
        table.add_row("quit / exit", "Exit the shell")

        console.print(table)

    async def _cmd_list(self, args: list[str]) -> None:
        print_notes(console, self.state.notes.search(self.search_term), term=self.search_term)

    async def _cmd_search(self, args: list[str]) -> None:
        self.search_term = " ".join(args)
        await self._cmd_list(args)

    async def _cmd_new(self, args: list[str]) -> None:
        self.state.notes.begin_create()
        print_edit_session(console, self.state.edit_session)

    async def _cmd_edit(self, args: list[str]) -> None:
        if not args:
            console.print("[red]Usage: edit <id>[/red]")
            return
        result = self.state.notes.begin_edit(args[0])
        if not result.success:
            print_error(console, result)
            return
        print_edit_session(console, self.state.edit_session)

    async def _set_draft(self, field: str, args: list[str]) -> None:
        try:
            self.state.edit_session.update_draft(**{field: " ".join(args)})
        except ConflictError as e:
            console.print(f"[red]{e.message}[/red] [dim]Use 'new' or 'edit <id>' first.[/dim]")
            return
        print_edit_session(console, self.state.edit_session)

    async def _cmd_title(self, args: list[str]) -> None:
        await self._set_draft("title", args)

    async def _cmd_content(self, args: list[str]) -> None:
        await self._set_draft("content", args)

    async def _cmd_show(self, args: list[str]) -> None:
        print_edit_session(console, self.state.edit_session)

    async def _cmd_save(self, args: list[str]) -> None:
        result = await self.state.notes.submit()
        if not result.success:
            print_error(console, result)
            return
        console.print("[green]Note saved.[/green]")
        await self._cmd_list([])

    async def _cmd_cancel(self, args: list[str]) -> None:
        self.state.edit_session.cancel()
        console.print("[dim]Discarded.[/dim]")

    async def _cmd_delete(self, args: list[str]) -> None:
        if not args:
            console.print("[red]Usage: delete <id>[/red]")
            return
        result = await self.state.notes.delete(args[0])
        if not result.success:
            print_error(console, result)
            return
        console.print("[green]Note deleted.[/green]")

    async def _cmd_reload(self, args: list[str]) -> None:
        profile = self.state.gate.profile
        if profile is None:
            console.print("[red]Not signed in[/red]")
            return
        result = await self.state.notes.load(profile.id)
        if not result.success:
            print_error(console, result)
            return
        await self._cmd_list([])

    async def _cmd_whoami(self, args: list[str]) -> None:
        profile = self.state.gate.profile
        if profile is not None:
            print_profile(console, profile)

    async def _cmd_signout(self, args: list[str]) -> None:
        await self.state.sign_out()
        console.print("Signed out.")
        self.running = False

    async def _cmd_clear(self, args: list[str]) -> None:
        """Clear the screen."""
        console.clear()

    async def _cmd_quit(self, args: list[str]) -> None:
        """Exit the shell."""
        self.running = False


async def run_shell() -> None:
    """Run the interactive shell."""
    try:
        state = create_app_state()
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        await InteractiveShell(state).run()
    finally:
        await state.close()
