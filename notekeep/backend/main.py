"""
Application State.

Composition root for one application run. AppState owns the store client
and the services built on it; nothing here is a module-level singleton,
so tests and the interactive shell each hold their own instance.

Usage:
    from notekeep.backend.main import create_app_state

    state = create_app_state()
    status = await state.start()
    if status.authenticated:
        result = await state.notes.create("Groceries", "milk, eggs")
    await state.close()
"""

from dataclasses import dataclass

from notekeep.backend.core.config import get_session_file_path
from notekeep.backend.core.logging import get_logger
from notekeep.backend.core.security import SessionFile
from notekeep.backend.core.store import StoreClient
from notekeep.backend.services.auth import AuthService
from notekeep.backend.services.edit_session import EditSession
from notekeep.backend.services.note import NoteService
from notekeep.backend.services.session import SessionGate, SessionStatus

logger = get_logger(__name__)


@dataclass
class AppState:
    """Everything one signed-in (or signing-in) user session needs."""

    store: StoreClient
    gate: SessionGate
    auth: AuthService
    notes: NoteService
    edit_session: EditSession

    async def start(self) -> SessionStatus:
        """
        Resolve the session and, when signed in, load the user's notes.

        A failed note load does not undo authentication; the error is
        logged and the collection stays empty for the caller to reload.
        """
        status = await self.gate.check_session()
        if status.authenticated and status.profile is not None:
            result = await self.notes.load(status.profile.id)
            if not result.success:
                logger.warning(
                    "Initial note load failed",
                    extra={"code": result.error_code, "error": result.error.message},
                )
        return status

    async def sign_out(self, revoke: bool = True) -> None:
        """Sign out locally at once, then revoke the token remotely if asked."""
        token = self.gate.sign_out()
        if revoke:
            await self.gate.revoke(token)

    async def close(self) -> None:
        await self.store.close()


def create_app_state(
    store: StoreClient | None = None,
    session_file: SessionFile | None = None,
) -> AppState:
    """
    Build an AppState.

    Args:
        store: Store client. If None, one is built from configuration.
        session_file: Persisted session. If None, the configured path is used.
    """
    store = store or StoreClient()
    if session_file is None:
        session_file = SessionFile(get_session_file_path())

    edit_session = EditSession()
    notes = NoteService(store, edit_session=edit_session)
    gate = SessionGate(store, session_file=session_file, on_sign_out=[notes.reset])
    auth = AuthService(store, gate)
    return AppState(
        store=store,
        gate=gate,
        auth=auth,
        notes=notes,
        edit_session=edit_session,
    )
