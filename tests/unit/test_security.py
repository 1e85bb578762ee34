"""JWT and password hashing tests."""

import jwt as pyjwt
import pytest

from election_cycle.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)

SECRET = "test-secret-key-for-testing-32chars"


class TestTokens:
    def test_access_token_claims(self) -> None:
        token = create_access_token("alice", "member", SECRET)
        payload = decode_token(token, SECRET)
        assert payload["sub"] == "alice"
        assert payload["role"] == "member"
        assert payload["type"] == "access"

    def test_refresh_token_has_no_role(self) -> None:
        payload = decode_token(create_refresh_token("alice", SECRET), SECRET)
        assert payload["type"] == "refresh"
        assert "role" not in payload

    def test_expired_token_rejected(self) -> None:
        token = create_access_token("alice", "member", SECRET, expires_minutes=-1)
        with pytest.raises(pyjwt.ExpiredSignatureError):
            decode_token(token, SECRET)

    def test_wrong_secret_rejected(self) -> None:
        token = create_access_token("alice", "member", SECRET)
        with pytest.raises(pyjwt.InvalidSignatureError):
            decode_token(token, "another-secret-key-of-sufficient-len")

    def test_malformed_token(self) -> None:
        with pytest.raises(pyjwt.DecodeError):
            decode_token("not.a.token", SECRET)


class TestPasswords:
    def test_hash_roundtrip(self) -> None:
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)
