"""
Auth Repository.

Access to the store's authentication endpoints. The identity provider
itself is external; this module only shapes its requests and responses.
"""

from typing import Any

from notekeep.backend.core.exceptions import RemoteError
from notekeep.backend.core.logging import get_logger
from notekeep.backend.core.store import StoreClient
from notekeep.backend.schemas.profile import Principal

logger = get_logger(__name__)


def _principal_from(payload: Any) -> Principal:
    """Build a Principal from either a session payload or a bare user payload."""
    if not isinstance(payload, dict):
        raise RemoteError("Unexpected auth payload from remote store")
    user = payload.get("user") if isinstance(payload.get("user"), dict) else payload
    if not user.get("id"):
        raise RemoteError("Auth response did not identify a user")
    return Principal(
        id=str(user["id"]),
        email=user.get("email"),
        access_token=payload.get("access_token"),
        refresh_token=payload.get("refresh_token"),
        expires_at=payload.get("expires_at"),
    )


class AuthRepository:
    """Sign-up, sign-in, token refresh, current user, sign-out and password recovery."""

    def __init__(self, store: StoreClient) -> None:
        self.store = store

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any] | None = None) -> Principal:
        """
        Register a new user.

        Returns a Principal with tokens when the store confirms accounts
        immediately, without tokens when email confirmation is pending.
        """
        payload = await self.store.auth(
            "POST",
            "signup",
            json={"email": email, "password": password, "data": metadata or {}},
        )
        return _principal_from(payload)

    async def sign_in(self, email: str, password: str) -> Principal:
        payload = await self.store.auth(
            "POST",
            "token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return _principal_from(payload)

    async def refresh(self, refresh_token: str) -> Principal:
        """Exchange a refresh token for a new session. The old refresh token is spent."""
        payload = await self.store.auth(
            "POST",
            "token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return _principal_from(payload)

    async def current_user(self) -> Principal | None:
        """Return the user behind the client's access token, or None without a token."""
        if self.store.access_token is None:
            return None
        payload = await self.store.auth("GET", "user")
        principal = _principal_from(payload)
        return principal.model_copy(update={"access_token": self.store.access_token})

    async def sign_out(self, access_token: str) -> None:
        """Revoke access_token remotely. The client may already have dropped it."""
        await self.store.auth(
            "POST", "logout", headers={"Authorization": f"Bearer {access_token}"},
        )

    async def recover(self, email: str) -> None:
        await self.store.auth("POST", "recover", json={"email": email})
