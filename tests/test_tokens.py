"""
Tests for utils/tokenJWT.py: issuing and verifying access tokens.
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from config import settings
from utils.errors import ExpiredToken, InvalidToken
from utils.tokenJWT import TokenClaims, create_access_token, verify_access_token


class TestTokenRoundTrip:
    @pytest.mark.parametrize("user_id,role", [(1, "admin"), (42, "doctor"), (7, "patient")])
    def test_verify_returns_issued_claims(self, user_id, role):
        token = create_access_token(user_id, role)
        assert verify_access_token(token) == TokenClaims(user_id=user_id, role=role)

    def test_default_expiry_follows_settings(self):
        token = create_access_token(1, "admin")
        payload = jwt.get_unverified_claims(token)
        assert payload["exp"] - payload["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def test_subject_is_encoded_as_string(self):
        payload = jwt.get_unverified_claims(create_access_token(5, "patient"))
        assert payload["sub"] == "5"
        assert payload["role"] == "patient"


class TestTokenRejection:
    def test_expired_token(self):
        token = create_access_token(1, "admin", expires_delta=timedelta(seconds=-5))
        with pytest.raises(ExpiredToken):
            verify_access_token(token)

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": "1", "role": "admin", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "another-secret",
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(InvalidToken):
            verify_access_token(token)

    def test_tampered_payload(self):
        header, _, signature = create_access_token(1, "patient").split(".")
        forged = jwt.encode({"sub": "1", "role": "admin"}, "x", algorithm="HS256").split(".")[1]
        with pytest.raises(InvalidToken):
            verify_access_token(f"{header}.{forged}.{signature}")

    def test_malformed_token(self):
        with pytest.raises(InvalidToken):
            verify_access_token("not-a-jwt")

    def test_missing_role_claim(self):
        token = jwt.encode(
            {"sub": "1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(InvalidToken):
            verify_access_token(token)

    def test_non_numeric_subject(self):
        token = jwt.encode(
            {"sub": "abc", "role": "admin", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(InvalidToken):
            verify_access_token(token)
