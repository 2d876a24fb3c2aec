"""
Security Utilities.

Session persistence and token inspection helpers.

The signed-in session is kept in a small JSON file so that separate CLI
invocations share it. Token signatures are verified by the store on every
request; locally we only read the expiry claim to fail closed early.
"""

import json
import os
from pathlib import Path
from typing import Any

from jose import JWTError, jwt

from notekeep.backend.core.logging import get_logger
from notekeep.backend.core.utils import utc_now

logger = get_logger(__name__)


def token_claims(token: str) -> dict[str, Any]:
    """Read JWT claims without verifying the signature. Returns {} for malformed tokens."""
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.warning("Token decode failed", extra={"error": str(e)})
        return {}


def token_expired(token: str, leeway_seconds: int = 0) -> bool:
    """
    Whether a JWT access token is expired or unreadable.

    Tokens without an exp claim are treated as not expired; the store
    remains the authority on their validity.
    """
    claims = token_claims(token)
    if not claims:
        return True
    exp = claims.get("exp")
    if exp is None:
        return False
    try:
        return float(exp) <= utc_now().timestamp() + leeway_seconds
    except (TypeError, ValueError):
        return True


class SessionFile:
    """
    Persisted session tokens.

    Usage:
        session_file = SessionFile(get_session_file_path())
        session_file.save({"access_token": "...", "user_id": "..."})
        data = session_file.load()
        session_file.clear()
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, Any] | None:
        """Return the stored session, or None if absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Session file unreadable", extra={"path": str(self.path), "error": str(e)})
            return None
        if not isinstance(data, dict) or not data.get("access_token"):
            return None
        return data

    def save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
