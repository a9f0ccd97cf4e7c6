"""
auth/models.py -- Domain dataclass for the user account.

Pattern: Data class (pure data container, zero logic). The store owns
persistence and the routes own the HTTP contract; this module only owns shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered Gatehouse account.

    user_name is derived from the email at registration (the local part,
    before the "@") and is what the login form submits.

    temp_password holds the one-time reset token issued by the forgot-password
    flow. There is at most one active token per user; it is None when no reset
    is pending and is cleared back to None the moment it is consumed.
    """

    first_name: str
    last_name: str
    user_name: str
    email: str
    hashed_password: str
    id: int | None = None
    is_email_verified: bool = False
    temp_password: str | None = None
    temp_password_expires_at: str | None = None  # ISO 8601 UTC
    created_at: str | None = None
    last_login: str | None = None

    @property
    def display_name(self) -> str:
        # Two spaces between names, as the reset email greeting expects.
        return f"{self.first_name}  {self.last_name}"


def user_name_from_email(email: str) -> str:
    """Return the local part of an email address ("ada@example.com" -> "ada")."""
    return email.split("@", 1)[0]
