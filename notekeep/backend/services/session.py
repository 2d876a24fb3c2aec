"""
Session Gate.

Decides at start-up whether the caller is signed in and owns the switch
back to signed-out.

States:
    checking → authenticated | unauthenticated
    unauthenticated → authenticated   (sign in / sign up)
    authenticated → unauthenticated   (sign out)

There is no way back into checking; a fresh gate is needed for that.
An expired saved session is refreshed once with its refresh token before
the gate gives up on it. check_session fails closed: every error becomes
an unauthenticated status carrying a notice.
"""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel

from notekeep.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    NotFoundError,
    RemoteError,
)
from notekeep.backend.core.logging import log_with_source
from notekeep.backend.core.security import SessionFile, token_expired
from notekeep.backend.core.store import StoreClient
from notekeep.backend.repositories.auth import AuthRepository
from notekeep.backend.repositories.profile import ProfileRepository
from notekeep.backend.schemas.profile import Principal, Profile
from notekeep.backend.services.base import BaseService


class SessionPhase(str, Enum):
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionStatus(BaseModel):
    """Outcome of the session check."""

    phase: SessionPhase
    profile: Profile | None = None
    notice: str | None = None

    @property
    def authenticated(self) -> bool:
        return self.phase == SessionPhase.AUTHENTICATED


CHECKING = SessionStatus(phase=SessionPhase.CHECKING)


class SessionGate(BaseService):
    """
    Authentication gate for one application run.

    Args:
        store: Store client; its access token is set and cleared here
        session_file: Where the session persists between runs (optional)
        on_sign_out: Callbacks run synchronously after signing out
    """

    def __init__(
        self,
        store: StoreClient,
        session_file: SessionFile | None = None,
        on_sign_out: list[Callable[[], None]] | None = None,
    ) -> None:
        super().__init__(store)
        self.auth = AuthRepository(store)
        self.profiles = ProfileRepository(store)
        self.session_file = session_file
        self._on_sign_out = list(on_sign_out or [])
        self._status = CHECKING

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def profile(self) -> Profile | None:
        return self._status.profile

    async def check_session(self) -> SessionStatus:
        """
        Resolve the checking phase. Never raises.

        Returns the settled status unchanged when called again.
        """
        if self._status.phase != SessionPhase.CHECKING:
            return self._status

        try:
            profile = await self._resolve_profile()
        except ApplicationError as e:
            log_with_source(
                self._logger, "session", "info", "No valid session",
                code=e.code, reason=e.message,
            )
            if isinstance(e, AuthenticationError) or getattr(e, "status_code", None) in (401, 403):
                self._drop_credentials()
            else:
                # keep the saved session; the store may just be unreachable
                self.store.set_access_token(None)
            self._status = SessionStatus(phase=SessionPhase.UNAUTHENTICATED, notice=e.message)
            return self._status

        log_with_source(self._logger, "session", "info", "Session restored", user_id=profile.id)
        self._status = SessionStatus(phase=SessionPhase.AUTHENTICATED, profile=profile)
        return self._status

    async def _resolve_profile(self) -> Profile:
        token = self.store.access_token
        refresh_token = None
        if token is None and self.session_file is not None:
            saved = self.session_file.load() or {}
            token = saved.get("access_token")
            refresh_token = saved.get("refresh_token")
        if token is None:
            raise AuthenticationError("Not signed in")
        if token_expired(token):
            if not refresh_token:
                raise AuthenticationError("Your session has expired. Please sign in again.")
            token = await self._refresh(refresh_token)

        self.store.set_access_token(token)
        principal = await self._execute_remote_operation("current_user", self.auth.current_user())
        if principal is None:
            raise AuthenticationError("Could not fetch user data.")
        return await self._load_profile(principal.id)

    async def _refresh(self, refresh_token: str) -> str:
        """Trade the saved refresh token for a new session and persist it."""
        self._log_debug("Refreshing expired session")
        try:
            principal = await self._execute_remote_operation(
                "refresh_session", self.auth.refresh(refresh_token),
            )
        except RemoteError as e:
            if e.status_code in (400, 401, 403):
                raise AuthenticationError("Your session has expired. Please sign in again.") from e
            raise
        if not principal.has_session:
            raise AuthenticationError("Your session has expired. Please sign in again.")

        self._persist(principal)
        log_with_source(self._logger, "session", "info", "Session refreshed", user_id=principal.id)
        return principal.access_token

    async def _load_profile(self, user_id: str) -> Profile:
        try:
            return await self._execute_remote_operation(
                "load_profile", self.profiles.select_by_id(user_id),
            )
        except NotFoundError as e:
            raise AuthenticationError("Could not load user profile.") from e

    async def authenticate(self, principal: Principal, profile: Profile | None = None) -> Profile:
        """
        Adopt a freshly issued session.

        Persists the tokens, loads the profile unless one is given, and
        moves the gate to authenticated. On failure the credentials are
        dropped again and the error propagates.

        Raises:
            AuthenticationError: If principal carries no session or has no profile
            RemoteError: If the profile cannot be fetched
        """
        if not principal.has_session:
            raise AuthenticationError("The store did not issue a session")

        self.store.set_access_token(principal.access_token)
        try:
            if profile is None:
                profile = await self._load_profile(principal.id)
        except ApplicationError:
            self.store.set_access_token(None)
            raise

        self._persist(principal)
        self._status = SessionStatus(phase=SessionPhase.AUTHENTICATED, profile=profile)
        log_with_source(self._logger, "session", "info", "Signed in", user_id=principal.id)
        return profile

    def sign_out(self) -> str | None:
        """
        Return to unauthenticated immediately.

        Clears the in-memory token and the persisted session, then runs the
        sign-out listeners. Returns the dropped access token so the caller
        may revoke it remotely.
        """
        token = self.store.access_token
        self._drop_credentials()
        self._status = SessionStatus(phase=SessionPhase.UNAUTHENTICATED)
        for callback in self._on_sign_out:
            callback()
        log_with_source(self._logger, "session", "info", "Signed out")
        return token

    async def revoke(self, access_token: str | None) -> bool:
        """Best-effort remote logout of a dropped token. Failures are only logged."""
        if not access_token:
            return False
        try:
            await self.auth.sign_out(access_token)
        except ApplicationError as e:
            log_with_source(
                self._logger, "session", "warning", "Remote sign-out failed", error=e.message,
            )
            return False
        return True

    def _persist(self, principal: Principal) -> None:
        if self.session_file is not None:
            self.session_file.save({
                "access_token": principal.access_token,
                "refresh_token": principal.refresh_token,
                "expires_at": principal.expires_at,
                "user_id": principal.id,
            })

    def _drop_credentials(self) -> None:
        self.store.set_access_token(None)
        if self.session_file is not None:
            self.session_file.clear()
