"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from app.core.config import get_settings

# bcrypt only looks at the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72


class BcryptPasswordHasher:
    """Salted one-way password hashing backed by bcrypt."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


class JwtTokenIssuer:
    """Issues and decodes signed, time-bounded session tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 1440) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, email: str, user_id: int) -> str:
        """Create a JWT with sub (user id), email, iat and exp."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Decode and validate a JWT; return payload (sub, email, exp, iat).
        Raises jwt.PyJWTError on invalid or expired token.
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self.algorithm],
            options={"require": ["sub", "exp"]},
        )


@lru_cache
def get_password_hasher() -> BcryptPasswordHasher:
    """Return the configured password hasher (dependency)."""
    return BcryptPasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


@lru_cache
def get_token_issuer() -> JwtTokenIssuer:
    """Return the configured token issuer (dependency)."""
    settings = get_settings()
    return JwtTokenIssuer(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )
