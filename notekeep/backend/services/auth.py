"""
Auth Service.

Sign-up, sign-in and password-reset flows. Form input is validated locally
first and nothing is sent to the store when it is invalid. Successful
sign-in and confirmed sign-up hand the issued session to the SessionGate.
"""

import re

from notekeep.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    RemoteError,
    ValidationError,
)
from notekeep.backend.core.store import StoreClient
from notekeep.backend.repositories.auth import AuthRepository
from notekeep.backend.repositories.profile import ProfileRepository
from notekeep.backend.schemas.base import OperationResult
from notekeep.backend.schemas.profile import Principal, Profile, SignUpForm
from notekeep.backend.services.base import BaseService
from notekeep.backend.services.session import SessionGate

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
PASSWORD_MIN_LENGTH = 6


def is_valid_email(email: str) -> bool:
    return bool(email.strip()) and EMAIL_PATTERN.search(email) is not None


class AuthService(BaseService):
    """
    Service for account flows.

    Handles form validation, the auth calls, and the profile row that
    accompanies every account.
    """

    def __init__(self, store: StoreClient, gate: SessionGate) -> None:
        super().__init__(store)
        self.gate = gate
        self.auth = AuthRepository(store)
        self.profiles = ProfileRepository(store)

    def _validate_email(self, email: str) -> None:
        if not is_valid_email(email):
            raise ValidationError(
                "Please enter a valid email address",
                details={"email": "invalid"},
            )

    def validate_sign_up(self, form: SignUpForm) -> None:
        """
        Check a sign-up form, reporting the first problem found.

        Raises:
            ValidationError: For the first failing field, in form order
        """
        if not form.first_name.strip():
            raise ValidationError("First name is required", details={"first_name": "required"})
        if not form.last_name.strip():
            raise ValidationError("Last name is required", details={"last_name": "required"})
        self._validate_email(form.email)
        if not form.phone.strip():
            raise ValidationError("Phone number is required", details={"phone": "required"})
        self._validate_string_length(
            form.password,
            "password",
            min_length=PASSWORD_MIN_LENGTH,
            message=f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
        )
        if form.password != form.confirm_password:
            raise ValidationError("Passwords do not match", details={"confirm_password": "mismatch"})

    async def sign_up(self, form: SignUpForm) -> OperationResult:
        """
        Register an account and its profile.

        When the store issues a session right away the profile row is
        written and the gate becomes authenticated. When it asks for email
        confirmation first, the returned Principal carries no tokens.
        """
        return await self._run("sign_up", self._sign_up(form))

    async def _sign_up(self, form: SignUpForm) -> Principal:
        self.validate_sign_up(form)
        email = form.email.strip()
        self._log_operation("Signing up", email=email)

        principal = await self._execute_remote_operation(
            "sign_up",
            self.auth.sign_up(
                email,
                form.password,
                metadata={"full_name": form.full_name, "phone": form.phone.strip()},
            ),
        )
        if not principal.has_session:
            self._log_operation("Sign-up awaiting email confirmation", user_id=principal.id)
            return principal

        self.store.set_access_token(principal.access_token)
        profile = Profile(
            id=principal.id,
            full_name=form.full_name,
            email=email,
            phone=form.phone.strip(),
        )
        try:
            profile = await self._execute_remote_operation(
                "upsert_profile", self.profiles.upsert_profile(profile),
            )
        except ApplicationError:
            self.store.set_access_token(None)
            raise
        await self.gate.authenticate(principal, profile)
        return principal

    async def sign_in(self, email: str, password: str) -> OperationResult:
        """Sign in with email and password."""
        return await self._run("sign_in", self._sign_in(email, password))

    async def _sign_in(self, email: str, password: str) -> Principal:
        self._validate_email(email)
        self._validate_required(
            {"password": password}, ["password"], message="Password is required",
        )
        email = email.strip()
        self._log_operation("Signing in", email=email)

        try:
            principal = await self._execute_remote_operation(
                "sign_in", self.auth.sign_in(email, password),
            )
        except RemoteError as e:
            if e.status_code in (400, 401):
                raise AuthenticationError(e.message) from e
            raise
        await self.gate.authenticate(principal)
        return principal

    async def request_password_reset(self, email: str) -> OperationResult:
        """Ask the store to email password-reset instructions."""
        return await self._run("request_password_reset", self._request_password_reset(email))

    async def _request_password_reset(self, email: str) -> str:
        if not email.strip():
            raise ValidationError(
                "Please enter your email address first", details={"email": "required"},
            )
        self._validate_email(email)
        email = email.strip()
        await self._execute_remote_operation("recover", self.auth.recover(email))
        self._log_operation("Password reset requested", email=email)
        return email
