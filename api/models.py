"""
API request and response models for TeamGate REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
teams/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models declare only the fields a client may set. Anything else in the
body is ignored (pydantic's default extra="ignore"), which is how signup drops
client-supplied role and team values.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from teams.models import Team

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /signup. role and team are never accepted here."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /login.

    No min_length: an empty username or password is simply a wrong
    credential and must produce the same 401 as any other.
    """

    username: str = Field(max_length=255)
    password: str = Field(max_length=255)


class TeamCreate(BaseModel):
    """Request body for POST /team."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)


class TeamRename(BaseModel):
    """Request body for PATCH /team/{team_id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user. Credentials are never serialized.

    teamid is 0 when the user belongs to no team.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    role: str
    teamid: int

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, username=user.username, role=user.role, teamid=user.team_id)


class TeamResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str

    @classmethod
    def from_team(cls, team: Team) -> "TeamResponse":
        return cls(id=team.id, name=team.name)


class LoginResponse(BaseModel):
    """Response body for POST /login. The token is the only field."""

    model_config = ConfigDict(frozen=True)

    token: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
