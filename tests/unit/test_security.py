"""Tests for token, password and JWT helpers."""

from datetime import timedelta
from uuid import uuid4

import pytest

from src.taskrelay.core.security import (
    create_access_token,
    decode_token,
    generate_token,
    hash_password,
    hash_token,
    verify_password,
)

pytestmark = pytest.mark.unit


class TestInviteTokens:
    def test_tokens_are_unique_and_url_safe(self):
        tokens = {generate_token() for _ in range(50)}
        assert len(tokens) == 50
        for token in tokens:
            assert len(token) >= 43
            assert all(c.isalnum() or c in "-_" for c in token)

    def test_hash_is_stable_sha256_hex(self):
        token = generate_token()
        assert hash_token(token) == hash_token(token)
        assert len(hash_token(token)) == 64
        assert hash_token(token) != token


class TestPasswords:
    def test_verify_roundtrip(self):
        hashed = hash_password("correct horse battery staple")
        assert verify_password("correct horse battery staple", hashed)
        assert not verify_password("wrong password", hashed)

    def test_invalid_hash_returns_false(self):
        assert verify_password("anything", "not-an-argon2-hash") is False


class TestAccessTokens:
    def test_claims(self):
        user_id = uuid4()
        payload = decode_token(create_access_token(user_id, "bob@example.com"))
        assert payload is not None
        assert payload["sub"] == str(user_id)
        assert payload["email"] == "bob@example.com"
        assert payload["type"] == "access"

    def test_expired_token_rejected(self):
        token = create_access_token(uuid4(), "bob@example.com", timedelta(seconds=-10))
        assert decode_token(token) is None

    def test_garbage_rejected(self):
        assert decode_token("not.a.jwt") is None
