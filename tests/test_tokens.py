"""
tests/test_tokens.py -- Unit tests for auth/tokens.py.

Covers:
  - Issued tokens decode to exactly the (id, username, role) they were given
  - No exp claim by default; exp present and enforced when configured
  - Foreign secret, tampered payload, and malformed input all raise InvalidToken
  - Claims of the wrong type raise InvalidToken
  - bcrypt helpers and authenticate_user() success/failure paths
"""

from __future__ import annotations

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.models import Identity, User
from auth.tokens import (
    InvalidToken,
    authenticate_user,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from core.config import get_settings

_FOREIGN_SECRET = "f" * 64


def _b64url(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _sign(payload: dict) -> str:
    return jwt.encode(payload, get_settings().secret_key, algorithm="HS256")


class TestIssueAndVerify:
    def test_round_trip_claims(self) -> None:
        token = create_access_token(7, "alice", "admin")
        assert decode_access_token(token) == Identity(id=7, username="alice", role="admin")

    def test_empty_role_survives(self) -> None:
        identity = decode_access_token(create_access_token(3, "bob", ""))
        assert identity.role == ""
        assert identity.is_admin is False

    def test_no_exp_claim_by_default(self) -> None:
        token = create_access_token(1, "alice", "")
        claims = jwt.get_unverified_claims(token)
        assert set(claims) == {"id", "username", "role"}

    def test_exp_claim_when_configured(self) -> None:
        token = create_access_token(1, "alice", "", expire_seconds=60)
        claims = jwt.get_unverified_claims(token)
        assert "exp" in claims
        assert decode_access_token(token).id == 1

    def test_expired_token_rejected(self) -> None:
        past = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = _sign({"id": 1, "username": "alice", "role": "", "exp": past})
        with pytest.raises(InvalidToken):
            decode_access_token(token)


class TestRejection:
    def test_foreign_secret(self) -> None:
        token = create_access_token(1, "alice", "admin", secret_key=_FOREIGN_SECRET)
        with pytest.raises(InvalidToken):
            decode_access_token(token)

    def test_foreign_secret_verifies_under_its_own_key(self) -> None:
        token = create_access_token(1, "alice", "admin", secret_key=_FOREIGN_SECRET)
        assert decode_access_token(token, secret_key=_FOREIGN_SECRET).username == "alice"

    def test_tampered_payload(self) -> None:
        """Swapping the payload for an escalated one must break the signature."""
        header, _payload, signature = create_access_token(5, "mallory", "").split(".")
        forged = _b64url({"id": 5, "username": "mallory", "role": "admin"})
        with pytest.raises(InvalidToken):
            decode_access_token(f"{header}.{forged}.{signature}")

    def test_tampered_signature(self) -> None:
        token = create_access_token(5, "mallory", "")
        flipped = token[:-2] + ("AA" if token[-2:] != "AA" else "BB")
        with pytest.raises(InvalidToken):
            decode_access_token(flipped)

    @pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b", "a.b.c", "...."])
    def test_malformed(self, garbage: str) -> None:
        with pytest.raises(InvalidToken):
            decode_access_token(garbage)

    @pytest.mark.parametrize(
        "payload",
        [
            {"username": "alice", "role": ""},
            {"id": "1", "username": "alice", "role": ""},
            {"id": True, "username": "alice", "role": ""},
            {"id": 1.5, "username": "alice", "role": ""},
            {"id": 1, "username": 42, "role": ""},
            {"id": 1, "username": "alice", "role": None},
            {"id": 1, "username": "alice"},
        ],
    )
    def test_wrong_claim_types(self, payload: dict) -> None:
        with pytest.raises(InvalidToken):
            decode_access_token(_sign(payload))


class TestPasswords:
    def test_hash_is_not_plaintext(self) -> None:
        hashed = hash_password("p1")
        assert hashed != "p1"
        assert verify_password("p1", hashed)
        assert not verify_password("p2", hashed)

    def test_verify_against_non_bcrypt_value(self) -> None:
        assert verify_password("p1", "p1") is False

    def test_bytes_past_72_are_significant(self) -> None:
        hashed = hash_password("A" * 72 + "correct-suffix")
        assert verify_password("A" * 72 + "correct-suffix", hashed)
        assert not verify_password("A" * 72 + "WRONG", hashed)
        assert not verify_password("A" * 72, hashed)


class TestAuthenticateUser:
    def test_success(self, user_store) -> None:
        user_store.create_user(User(username="alice", hashed_password=hash_password("p1")))
        user = authenticate_user(user_store, "alice", "p1")
        assert user is not None
        assert user.username == "alice"

    def test_wrong_password(self, user_store) -> None:
        user_store.create_user(User(username="alice", hashed_password=hash_password("p1")))
        assert authenticate_user(user_store, "alice", "nope") is None

    def test_unknown_username(self, user_store) -> None:
        assert authenticate_user(user_store, "ghost", "p1") is None

    def test_username_match_is_exact(self, user_store) -> None:
        user_store.create_user(User(username="alice", hashed_password=hash_password("p1")))
        assert authenticate_user(user_store, "Alice", "p1") is None
        assert authenticate_user(user_store, "alice ", "p1") is None
