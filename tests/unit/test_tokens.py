"""
Unit tests for bearer token issuing and validation.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from tubely.core.media.errors import Unauthorized
from tubely.infrastructure.auth.tokens import (
    ALGORITHM,
    JWTCredentialValidator,
    issue_token,
)

SECRET = "test-secret-key-that-is-long-enough"


class TestJWTCredentialValidator:

    def test_round_trip_returns_user_id(self):
        user_id = uuid4()
        token = issue_token(user_id, SECRET)

        assert JWTCredentialValidator(SECRET).validate(token) == user_id

    def test_wrong_secret(self):
        token = issue_token(uuid4(), "some-other-secret-of-similar-length")
        with pytest.raises(Unauthorized, match="Invalid token"):
            JWTCredentialValidator(SECRET).validate(token)

    def test_expired_token(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = issue_token(uuid4(), SECRET, now=issued)

        with pytest.raises(Unauthorized, match="expired"):
            JWTCredentialValidator(SECRET).validate(token)

    def test_wrong_issuer(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "iss": "someone-else",
                "sub": str(uuid4()),
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(hours=1)).timestamp()),
            },
            SECRET,
            algorithm=ALGORITHM,
        )
        with pytest.raises(Unauthorized):
            JWTCredentialValidator(SECRET).validate(token)

    def test_subject_must_be_uuid(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "iss": "tubely-access",
                "sub": "not-a-uuid",
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(hours=1)).timestamp()),
            },
            SECRET,
            algorithm=ALGORITHM,
        )
        with pytest.raises(Unauthorized, match="subject"):
            JWTCredentialValidator(SECRET).validate(token)

    def test_garbage_token(self):
        with pytest.raises(Unauthorized):
            JWTCredentialValidator(SECRET).validate("not.a.jwt")

    def test_unconfigured_secret_rejects_everything(self):
        token = issue_token(uuid4(), SECRET)
        with pytest.raises(Unauthorized):
            JWTCredentialValidator("").validate(token)
