"""
Tests for session token validation
"""
import asyncio
import time

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError, jwt

from storefront.core.auth import decode_session_token, get_current_identity


def make_token(secret="test-secret", **claims):
    payload = {
        "sub": "user_buyer",
        "email": "buyer@example.com",
        "name": "Buyer",
        "iat": int(time.time()),
        "exp": int(time.time()) + 3600,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def resolve(token, settings):
    credentials = None
    if token is not None:
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)
    return asyncio.run(get_current_identity(credentials, settings))


class TestDecodeSessionToken:

    def test_valid_token(self, settings):
        payload = decode_session_token(make_token(), settings)

        assert payload["sub"] == "user_buyer"

    def test_wrong_secret(self, settings):
        with pytest.raises(JWTError):
            decode_session_token(make_token(secret="other-secret"), settings)

    def test_missing_secret_rejects_everything(self, settings):
        settings.AUTH_SECRET = ""

        with pytest.raises(JWTError):
            decode_session_token(make_token(), settings)

    def test_issuer_checked_when_configured(self, settings):
        settings.AUTH_ISSUER = "https://auth.example.com"

        with pytest.raises(JWTError):
            decode_session_token(make_token(iss="https://evil.example.com"), settings)

        payload = decode_session_token(make_token(iss="https://auth.example.com"), settings)
        assert payload["iss"] == "https://auth.example.com"


class TestGetCurrentIdentity:

    def test_identity_from_token(self, settings):
        identity = resolve(make_token(), settings)

        assert identity.id == "user_buyer"
        assert identity.email == "buyer@example.com"
        assert identity.name == "Buyer"

    def test_no_token(self, settings):
        assert resolve(None, settings) is None

    def test_expired_token(self, settings):
        token = make_token(exp=int(time.time()) - 60)

        assert resolve(token, settings) is None

    def test_garbage_token(self, settings):
        assert resolve("not-a-jwt", settings) is None

    def test_token_without_subject(self, settings):
        token = make_token(sub=None)

        assert resolve(token, settings) is None

    def test_id_claim_fallback(self, settings):
        token = jwt.encode(
            {"id": "user_legacy", "exp": int(time.time()) + 60},
            "test-secret",
            algorithm="HS256"
        )

        assert resolve(token, settings).id == "user_legacy"
