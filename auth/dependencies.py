"""
auth/dependencies.py -- FastAPI Depends() helpers forming the auth gate.

The gate has two stages that always run in this order:
  1. get_current_identity() -- authentication. Reads the
     "Authorization: Bearer <token>" header, verifies the JWT, and returns a
     typed Identity.
  2. require_admin() -- authorization. Depends on get_current_identity(), so
     FastAPI cannot call it without the identity having been resolved first.
     Rejects any identity whose role is not "admin".

Failure messages are short and fixed so clients can match on them:
  401 missing token / invalid token format / invalid token / invalid user
  403 access denied

Layer rule: no imports from api/, core/ (other than via auth.tokens), or teams/.
  auth/dependencies.py may import from fastapi because this module is part of
  the FastAPI dependency injection system.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request

from auth.models import Identity
from auth.tokens import InvalidToken, decode_access_token

_BEARER_PREFIX = "Bearer "


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "unauthorized", "message": message},
    )


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    The header is split on the literal "Bearer " and must yield exactly two
    parts, so "Bearer abc" is accepted while "abc", "Token abc" and
    "Bearer a Bearer b" are rejected as malformed.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        raise _unauthorized("missing token")

    parts = auth_header.split(_BEARER_PREFIX)
    if len(parts) != 2:
        raise _unauthorized("invalid token format")

    try:
        return decode_access_token(parts[1])
    except InvalidToken:
        raise _unauthorized("invalid token") from None


def require_admin(identity: Optional[Identity] = Depends(get_current_identity)) -> Identity:
    """Require the "admin" role. Raises HTTP 401 with no identity, HTTP 403 if not admin.

    Use as a FastAPI dependency:
        @router.post("/admin-only")
        def route(identity: Identity = Depends(require_admin)): ...
    """
    if identity is None:
        raise _unauthorized("invalid user")
    if not identity.is_admin:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "access denied"},
        )
    return identity
