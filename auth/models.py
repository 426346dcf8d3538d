"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors teams/models.py
-- dataclasses own domain shape; stores and routes do the work.

Layer rule: no imports from api/, core/, or teams/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    role is free text: "" means a regular user, "admin" unlocks the admin
    gate. Signup always writes "" -- admins are created with the CLI.

    team_id references teams.id but is not a foreign key. 0 means unassigned.
    """

    username: str
    hashed_password: str
    role: str = ""
    team_id: int = 0
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The verified claims of a bearer token.

    Produced by auth.tokens.decode_access_token() and handed to route handlers
    by the auth gate dependencies. Never read from the database -- it is
    exactly what the token says at the time it was issued.
    """

    id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
