"""
api/routes/auth.py -- Account registration and login endpoints.

Routes:
  POST /signup   -- create a regular (non-admin, unassigned) user
  POST /login    -- password login; returns a bearer token

Both routes are public: they are how a client obtains a token in the first
place, so they sit in front of the auth gate, not behind it.

Security:
  POST /login is rate-limited per client IP (Settings.login_rate_limit).
  authenticate_user() provides timing equalization -- use it, never inline.
  Unknown username and wrong password return the identical 401 body.
  Cache-Control: no-store on login responses.
  Signup ignores role/team in the body; the response never carries credentials.
"""

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, LoginRequest, LoginResponse, SignupRequest, UserResponse
from auth.models import User
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token, hash_password
from core.config import get_settings

logger = logging.getLogger("teamgate.api")

router = APIRouter()


def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


@router.post("/signup", response_model=UserResponse)
def signup(request: Request, body: SignupRequest) -> UserResponse:
    """Register a new user with an empty role and no team."""
    user_store: UserStore = request.app.state.user_store

    user = User(username=body.username, hashed_password=hash_password(body.password))
    try:
        user_store.create_user(user)
    except SQLAlchemyError as exc:
        logger.warning("Signup for %r failed: %s", body.username, exc)
        raise HTTPException(
            status_code=500,
            detail={"code": "internal_error", "message": "failed to create user"},
        ) from exc

    logger.info("User %r signed up (id=%d)", user.username, user.id)
    return UserResponse.from_user(user)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(_login_rate_limit)  # below @router so the registered endpoint is the limited one
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; return a signed bearer token.

    The token carries id, username and role as they are stored right now.
    A later role or team change is not reflected until the user logs in again.
    """
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.username, body.password)
    if user is None:
        logger.warning("Failed login for %r", body.username)
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(
                error=ErrorDetail(code="unauthorized", message="invalid credentials"),
            ).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token = create_access_token(user.id, user.username, user.role)
    resp = JSONResponse(status_code=200, content=LoginResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp
