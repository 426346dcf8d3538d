"""
auth/tokens.py -- JWT issuance/verification, password hashing, and login.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       exactly three identity claims: id, username, role. An exp claim is
       added only when Settings.token_expire_seconds > 0; with the default of
       0 tokens never expire. Verification raises InvalidToken on any failure
       -- the auth gate turns that into a 401.

  Passwords: bcrypt, used directly (no passlib wrapper), over a base64
       SHA-256 digest of the password so no input byte is dropped by bcrypt's
       72-byte limit. Stored credentials are always hashes; the login
       contract is still "submitted password matches the stored credential".
       The _DUMMY_HASH constant enables timing equalization in
       authenticate_user() so response time does not reveal whether a
       username exists.

  SECRET_KEY: sourced from core.config.get_settings() once at module load.
       The same key signs and verifies for the lifetime of the process.

Layer rule: no imports from api/ or teams/. Import from core/ is allowed.
"""

from __future__ import annotations

import base64
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import Identity
from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("teamgate.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"


class InvalidToken(Exception):
    """Raised when a bearer token fails signature, structure, or claim checks."""


# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def _encode(plain: str) -> bytes:
    # bcrypt reads at most 72 bytes. Digest first so every byte of a long
    # password counts; base64 keeps NUL bytes out of the bcrypt input.
    return base64.b64encode(hashlib.sha256(plain.encode("utf-8")).digest())


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    The password is SHA-256 digested before bcrypt, so passwords longer than
    bcrypt's 72-byte input are still compared in full.
    """
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash (e.g. a row written by hand).
        return False


# Computed once at module load so the first failed login is not measurably
# faster than later ones.
_DUMMY_HASH: str = hash_password("teamgate_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(
    user_id: int,
    username: str,
    role: str,
    expire_seconds: int | None = None,
    secret_key: str | None = None,
) -> str:
    """Encode a signed JWT carrying the id, username and role claims.

    Args:
        user_id:        Numeric user ID stored in the DB.
        username:       Username at the time of issue.
        role:           "" or "admin".
        expire_seconds: Overrides Settings.token_expire_seconds. 0 omits exp.
        secret_key:     Overrides Settings.secret_key. Tests use this to mint
                        tokens under a foreign key.
    """
    payload: dict = {
        "id": user_id,
        "username": username,
        "role": role,
    }
    duration = _settings.token_expire_seconds if expire_seconds is None else expire_seconds
    if duration > 0:
        payload["exp"] = datetime.now(timezone.utc) + timedelta(seconds=duration)
    return jwt.encode(payload, secret_key or _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str, secret_key: str | None = None) -> Identity:
    """Verify a JWT and return the Identity it carries.

    Raises InvalidToken if the signature does not verify, the token is not a
    well-formed JWS, an exp claim is present and in the past, or any of the
    three identity claims is missing or of the wrong type.
    """
    try:
        payload = jwt.decode(token, secret_key or _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise InvalidToken(str(exc)) from exc

    user_id = payload.get("id")
    username = payload.get("username")
    role = payload.get("role")
    # bool is an int subclass; a token claiming id=true is not an identity.
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise InvalidToken("claim 'id' must be an integer")
    if not isinstance(username, str):
        raise InvalidToken("claim 'username' must be a string")
    if not isinstance(role, str):
        raise InvalidToken("claim 'role' must be a string")
    return Identity(id=user_id, username=username, role=role)


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, username: str, password: str) -> User | None:
    """Check a username/password pair against the user store.

    Always runs bcrypt whether or not the user exists:
    - Unknown username: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success, None on any failure. Callers must not tell
    the two failure cases apart in their response.
    """
    user = store.get_by_username(username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
