"""
Profile Schemas.

The signed-in principal, its profile row, and the sign-up form.
"""

from pydantic import BaseModel, ConfigDict, Field


class Principal(BaseModel):
    """Identity returned by the auth subsystem, with tokens when a session was issued."""

    id: str
    email: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def has_session(self) -> bool:
        return self.access_token is not None


class Profile(BaseModel):
    """Row of the profiles table for the signed-in user."""

    id: str
    full_name: str
    email: str
    phone: str | None = None

    model_config = ConfigDict(extra="ignore")


class SignUpForm(BaseModel):
    """Raw sign-up input. Validated by AuthService before anything is sent."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    password: str = Field(default="", repr=False)
    confirm_password: str = Field(default="", repr=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}"
