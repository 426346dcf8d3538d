"""
api/routes/teams.py -- Team management and membership endpoints.

Routes:
  POST   /team                              -- create team (admin only)
  POST   /team/{team_id}/user/{user_id}     -- assign user to team (admin only)
  DELETE /team/{team_id}/user/{user_id}     -- unassign user (admin only)
  GET    /team/{team_id}                    -- list team members (public)
  PATCH  /team/{team_id}                    -- rename team (admin only)

Dependency order on every route is: admin gate, then team lookup, then user
lookup, then body validation. FastAPI resolves Depends() parameters in
declaration order and validates the body last, so an unknown team is a 404
even when the request body is also invalid.

Membership writes are last-write-wins. The existence checks and the save are
separate statements, not one transaction.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from api.models import TeamCreate, TeamRename, TeamResponse, UserResponse
from auth.dependencies import require_admin
from auth.models import Identity, User
from auth.store import UserStore
from teams.models import Team
from teams.store import TeamStore

logger = logging.getLogger("teamgate.api")

# Auth policy:
# - POST   /team:                          requires admin (require_admin)
# - POST   /team/{team_id}/user/{user_id}: requires admin (require_admin)
# - DELETE /team/{team_id}/user/{user_id}: requires admin (require_admin)
# - GET    /team/{team_id}:                public
# - PATCH  /team/{team_id}:                requires admin (require_admin)
router = APIRouter()


# ---------------------------------------------------------------------------
# Lookup dependencies
# ---------------------------------------------------------------------------


def _parse_id(raw: str) -> int | None:
    # Path ids are taken as text so a non-numeric id is "not found", not a 400.
    try:
        value = int(raw)
    except ValueError:
        return None
    # Out of range for a 64-bit INTEGER column; no row can have it.
    if not 0 < value < 2**63:
        return None
    return value


def _not_found(message: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": message})


def _internal_error(message: str) -> HTTPException:
    return HTTPException(status_code=500, detail={"code": "internal_error", "message": message})


def get_team_or_404(request: Request, team_id: str) -> Team:
    """Resolve the {team_id} path segment to a Team or raise HTTP 404."""
    team_store: TeamStore = request.app.state.team_store
    tid = _parse_id(team_id)
    team = team_store.get_by_id(tid) if tid is not None else None
    if team is None:
        raise _not_found("team not found")
    return team


def get_user_or_404(request: Request, user_id: str) -> User:
    """Resolve the {user_id} path segment to a User or raise HTTP 404."""
    user_store: UserStore = request.app.state.user_store
    uid = _parse_id(user_id)
    user = user_store.get_by_id(uid) if uid is not None else None
    if user is None:
        raise _not_found("user not found")
    return user


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------


@router.post("/team", response_model=TeamResponse)
def create_team(
    request: Request,
    body: TeamCreate,
    identity: Identity = Depends(require_admin),
) -> TeamResponse:
    team_store: TeamStore = request.app.state.team_store
    team = Team(name=body.name)
    try:
        team_store.create_team(team)
    except SQLAlchemyError as exc:
        logger.warning("Create team %r failed: %s", body.name, exc)
        raise _internal_error("failed to create team") from exc

    logger.info("Team %r created (id=%d) by %s", team.name, team.id, identity.username)
    return TeamResponse.from_team(team)


@router.post("/team/{team_id}/user/{user_id}", response_model=UserResponse)
def add_user_to_team(
    request: Request,
    identity: Identity = Depends(require_admin),
    team: Team = Depends(get_team_or_404),
    user: User = Depends(get_user_or_404),
) -> UserResponse:
    """Assign the user to the team, replacing any previous assignment."""
    user_store: UserStore = request.app.state.user_store
    user.team_id = team.id
    try:
        saved = user_store.save_user(user)
    except SQLAlchemyError as exc:
        logger.warning("Add user %d to team %d failed: %s", user.id, team.id, exc)
        raise _internal_error("failed to add user to team") from exc
    if not saved:
        raise _not_found("user not found")

    logger.info("User %d added to team %d by %s", user.id, team.id, identity.username)
    return UserResponse.from_user(user)


@router.delete("/team/{team_id}/user/{user_id}", response_model=UserResponse)
def remove_user_from_team(
    request: Request,
    identity: Identity = Depends(require_admin),
    team: Team = Depends(get_team_or_404),
    user: User = Depends(get_user_or_404),
) -> UserResponse:
    """Clear the user's team assignment.

    The user does not have to be a member of {team_id}: the team only has to
    exist. Removing an unassigned user is a no-op that still returns 200.
    """
    user_store: UserStore = request.app.state.user_store
    user.team_id = 0
    try:
        saved = user_store.save_user(user)
    except SQLAlchemyError as exc:
        logger.warning("Remove user %d from team %d failed: %s", user.id, team.id, exc)
        raise _internal_error("failed to remove user from team") from exc
    if not saved:
        raise _not_found("user not found")

    logger.info("User %d removed from team %d by %s", user.id, team.id, identity.username)
    return UserResponse.from_user(user)


@router.patch("/team/{team_id}", response_model=TeamResponse)
def rename_team(
    request: Request,
    body: TeamRename,
    identity: Identity = Depends(require_admin),
    team: Team = Depends(get_team_or_404),
) -> TeamResponse:
    team_store: TeamStore = request.app.state.team_store
    old_name = team.name
    team.name = body.name
    try:
        saved = team_store.save_team(team)
    except SQLAlchemyError as exc:
        logger.warning("Rename team %d failed: %s", team.id, exc)
        raise _internal_error("failed to update team") from exc
    if not saved:
        raise _not_found("team not found")

    logger.info("Team %d renamed %r -> %r by %s", team.id, old_name, team.name, identity.username)
    return TeamResponse.from_team(team)


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.get("/team/{team_id}", response_model=list[UserResponse])
def get_team_members(
    request: Request,
    team: Team = Depends(get_team_or_404),
) -> list[UserResponse]:
    """Return the members of the team.

    Only the member list is returned; the team's own id and name are not part
    of the body.
    """
    user_store: UserStore = request.app.state.user_store
    try:
        members = user_store.list_by_team(team.id)
    except SQLAlchemyError as exc:
        logger.warning("Listing members of team %d failed: %s", team.id, exc)
        raise _internal_error("failed to fetch users") from exc
    return [UserResponse.from_user(u) for u in members]
