"""Tests for password hashing and access tokens."""
import pytest
from datetime import timedelta
from jose import JWTError, jwt


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_password_is_salted_bcrypt(self):
        """Hashes are bcrypt and differ between calls."""
        from kaizen.utils.auth import hash_password

        hashed = hash_password("mysecretpassword123")

        assert hashed.startswith("$2b$")
        assert hashed != hash_password("mysecretpassword123")

    def test_verify_password(self):
        """Only the original password verifies."""
        from kaizen.utils.auth import hash_password, verify_password

        hashed = hash_password("mysecretpassword123")

        assert verify_password("mysecretpassword123", hashed) is True
        assert verify_password("wrongpassword", hashed) is False
        assert verify_password("", hashed) is False


class TestAccessTokens:
    """Tests for the identity token round trip."""

    def test_token_resolves_to_user_id(self):
        from kaizen.utils.auth import create_access_token, verify_access_token

        token = create_access_token(user_id="65a000000000000000000001")

        assert verify_access_token(token) == "65a000000000000000000001"

    def test_token_claims(self):
        """Token carries subject, issue and expiry times."""
        from kaizen.config import settings
        from kaizen.utils.auth import create_access_token

        token = create_access_token(user_id="user123", expires_delta=timedelta(hours=1))
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])

        assert payload["sub"] == "user123"
        assert payload["exp"] - payload["iat"] == 3600

    def test_garbage_token_rejected(self):
        from kaizen.utils.auth import verify_access_token

        with pytest.raises(JWTError):
            verify_access_token("invalid.token.here")

    def test_expired_token_rejected(self):
        from kaizen.utils.auth import create_access_token, verify_access_token

        token = create_access_token(user_id="user123", expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            verify_access_token(token)

    def test_token_signed_with_other_secret_rejected(self):
        from kaizen.config import settings
        from kaizen.utils.auth import verify_access_token

        token = jwt.encode({"sub": "user123"}, "not-the-secret", algorithm=settings.jwt_algorithm)

        with pytest.raises(JWTError):
            verify_access_token(token)

    def test_token_without_subject_rejected(self):
        from kaizen.config import settings
        from kaizen.utils.auth import verify_access_token

        token = jwt.encode({"name": "x"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

        with pytest.raises(JWTError, match="sub"):
            verify_access_token(token)
