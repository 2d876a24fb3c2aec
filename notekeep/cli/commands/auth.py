"""
Account Commands.

Sign up, sign in, sign out and session inspection.
"""

import asyncio

import typer
from rich.console import Console

from notekeep.backend.schemas.profile import SignUpForm
from notekeep.cli.client import open_state
from notekeep.cli.display import print_error, print_profile

app = typer.Typer(help="Account commands")
console = Console()


@app.command()
def signup(
    first_name: str = typer.Option(..., prompt=True, help="First name"),
    last_name: str = typer.Option(..., prompt=True, help="Last name"),
    email: str = typer.Option(..., prompt=True, help="Email address"),
    phone: str = typer.Option(..., prompt=True, help="Phone number"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=False, help="Password",
    ),
    confirm_password: str = typer.Option(
        ..., prompt="Confirm password", hide_input=True, help="Password again",
    ),
) -> None:
    """
    Create an account.

    Examples:
        cli.py auth signup
        cli.py auth signup --email jane@example.com
    """
    form = SignUpForm(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        password=password,
        confirm_password=confirm_password,
    )
    asyncio.run(_signup(form))


async def _signup(form: SignUpForm) -> None:
    async with open_state(require_session=False) as state:
        result = await state.auth.sign_up(form)
        if not result.success:
            print_error(console, result)
            raise typer.Exit(1)
        if not result.data.has_session:
            console.print("[green]Account created.[/green] Check your email to confirm it, then sign in.")
            return
        console.print("[green]Account created successfully![/green] Welcome to your new account.")
        if state.gate.profile is not None:
            print_profile(console, state.gate.profile)


@app.command()
def signin(
    email: str = typer.Option(..., prompt=True, help="Email address"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Password"),
) -> None:
    """
    Sign in and remember the session.

    Examples:
        cli.py auth signin
        cli.py auth signin --email jane@example.com
    """
    asyncio.run(_signin(email, password))


async def _signin(email: str, password: str) -> None:
    async with open_state(require_session=False) as state:
        result = await state.auth.sign_in(email, password)
        if not result.success:
            print_error(console, result)
            raise typer.Exit(1)
        console.print("[green]Welcome back![/green] You have been signed in successfully.")
        if state.gate.profile is not None:
            print_profile(console, state.gate.profile)


@app.command()
def signout() -> None:
    """Forget the saved session and revoke it remotely."""
    asyncio.run(_signout())


async def _signout() -> None:
    async with open_state(require_session=False) as state:
        await state.sign_out()
    console.print("Signed out.")


@app.command()
def whoami() -> None:
    """Show the signed-in profile."""
    asyncio.run(_whoami())


async def _whoami() -> None:
    async with open_state() as state:
        print_profile(console, state.gate.profile)


@app.command("reset-password")
def reset_password(
    email: str = typer.Option(..., prompt=True, help="Email address"),
) -> None:
    """Email password reset instructions."""
    asyncio.run(_reset_password(email))


async def _reset_password(email: str) -> None:
    async with open_state(require_session=False) as state:
        result = await state.auth.request_password_reset(email)
        if not result.success:
            print_error(console, result)
            raise typer.Exit(1)
        console.print("Password reset email sent. Check your email for instructions.")
