from __future__ import annotations

from datetime import timedelta

from jose import jwt

from church_registry.auth.utils import (
    JWT_ALGORITHM,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from church_registry.core.config import settings


class TestPasswordHashing:
    def test_hash_password(self):
        hashed = hash_password("testpass123")
        assert hashed != "testpass123"
        assert len(hashed) > 0

    def test_verify_password_success(self):
        hashed = hash_password("testpass123")
        assert verify_password("testpass123", hashed) is True

    def test_verify_password_failure(self):
        hashed = hash_password("testpass123")
        assert verify_password("wrongpass", hashed) is False


class TestJWT:
    def test_create_access_token(self):
        token = create_access_token({"sub": "user123"})
        assert isinstance(token, str)
        assert len(token) > 0

    def test_decode_access_token_success(self):
        token = create_access_token(
            {"sub": "user123", "user_id": "user123", "role": "wereda_admin"}
        )
        payload = decode_access_token(token)
        assert payload is not None
        assert payload["sub"] == "user123"
        assert payload["role"] == "wereda_admin"
        assert payload["type"] == "access"

    def test_lifetime(self):
        token = create_access_token({"sub": "user123"}, timedelta(minutes=5))
        payload = decode_access_token(token)
        assert payload["exp"] - payload["iat"] == 300

    def test_default_lifetime(self):
        payload = decode_access_token(create_access_token({"sub": "user123"}))
        expected = settings.access_token_expire_minutes * 60
        assert payload["exp"] - payload["iat"] == expected

    def test_only_expected_claims(self):
        payload = decode_access_token(create_access_token({"sub": "user123"}))
        assert set(payload) == {"sub", "type", "iat", "exp"}

    def test_decode_access_token_invalid(self):
        assert decode_access_token("invalid.token.here") is None

    def test_decode_access_token_expired(self):
        token = create_access_token({"sub": "user123"}, timedelta(seconds=-1))
        assert decode_access_token(token) is None

    def test_token_without_subject_rejected(self):
        token = create_access_token({"role": "admin"})
        assert decode_access_token(token) is None

    def test_other_token_type_rejected(self):
        token = jwt.encode(
            {"sub": "user123", "type": "refresh", "exp": 4102444800},
            settings.jwt_secret,
            algorithm=JWT_ALGORITHM,
        )
        assert decode_access_token(token) is None

    def test_wrong_secret_rejected(self):
        token = jwt.encode(
            {"sub": "user123", "type": "access", "exp": 4102444800},
            "not-the-secret",
            algorithm=JWT_ALGORITHM,
        )
        assert decode_access_token(token) is None
