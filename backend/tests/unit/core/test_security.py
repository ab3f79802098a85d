"""
Tests for JWT authentication security functions.
"""

import pytest
from datetime import datetime, timedelta, UTC
from jose import jwt

from app.core.security import (
    create_access_token,
    verify_token,
    JWT_SECRET_KEY,
    ALGORITHM,
)


class TestTokenGeneration:
    """Tests for JWT token generation functions."""

    def test_access_token_generation(self):
        """Test that access tokens are generated correctly with expected claims."""
        token = create_access_token({"sub": "test-user-id"})

        assert isinstance(token, str)
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[ALGORITHM])

        assert payload["sub"] == "test-user-id"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_token_expiration(self):
        """Test that token expiration dates are set correctly."""
        now = datetime.now(UTC)

        access_token = create_access_token({"sub": "user-id"})
        access_payload = jwt.decode(
            access_token, JWT_SECRET_KEY, algorithms=[ALGORITHM]
        )

        access_exp = datetime.fromtimestamp(access_payload["exp"], UTC)
        expected_access_exp = now + timedelta(minutes=15)

        # Allow for a small tolerance (3 seconds) in our test
        assert abs((access_exp - expected_access_exp).total_seconds()) < 3


class TestTokenValidation:
    """Tests for JWT token validation functions."""

    def test_valid_token_verification(self):
        """Test that valid tokens are verified correctly."""
        access_token = create_access_token({"sub": "user-id"})

        payload = verify_token(access_token)

        assert payload["sub"] == "user-id"
        assert payload["type"] == "access"

    def test_invalid_token_verification(self):
        """Test that invalid tokens raise appropriate errors."""
        with pytest.raises(ValueError, match="Invalid token"):
            verify_token("invalid-token")

    def test_wrong_token_type(self):
        """Test that tokens with wrong type raise appropriate errors."""
        access_token = create_access_token({"sub": "user-id"})

        with pytest.raises(ValueError, match="Token is not a refresh token"):
            verify_token(access_token, token_type="refresh")

    def test_expired_token(self):
        """Test that expired tokens raise appropriate errors."""
        payload = {
            "sub": "test-user",
            "type": "access",
            "exp": datetime.now(UTC) - timedelta(hours=1),
        }
        expired_token = jwt.encode(payload, JWT_SECRET_KEY, algorithm=ALGORITHM)

        with pytest.raises(ValueError, match="Invalid token"):
            verify_token(expired_token)
