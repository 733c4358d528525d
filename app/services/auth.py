"""Account registration, credential login and profile lookup.

All domain decisions (email uniqueness, the active flag, password checks) live
here. Persistence, hashing and token signing are injected collaborators.
"""

from __future__ import annotations

import logging
from typing import Protocol

from app.models import User
from app.schemas.auth import AuthResponse, UserProfile

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for expected, user-facing auth failures."""

    default_message = "Authentication error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmailError(AuthError):
    """Raised when registering an email that already belongs to an account."""

    default_message = "Email is already registered."


class InvalidCredentialsError(AuthError):
    """Raised for an unknown email or a wrong password (indistinguishable on purpose)."""

    default_message = "Invalid email or password."


class InactiveAccountError(AuthError):
    """Raised when the account exists but has been deactivated."""

    default_message = "Account is inactive."


class UserNotFoundError(AuthError):
    """Raised when no user has the requested id."""

    default_message = "User not found."


class UserStore(Protocol):
    def exists_by_email(self, email: str) -> bool: ...

    def save(self, user: User) -> User: ...

    def find_by_email(self, email: str) -> User | None: ...

    def find_by_id(self, user_id: int) -> User | None: ...


class PasswordHasher(Protocol):
    def hash(self, plain_password: str) -> str: ...

    def verify(self, plain_password: str, hashed: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue(self, email: str, user_id: int) -> str: ...


class AuthService:
    """Orchestrates the user store, password hasher and token issuer."""

    def __init__(self, store: UserStore, hasher: PasswordHasher, issuer: TokenIssuer) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer

    def register(self, name: str, email: str, password: str) -> AuthResponse:
        """
        Create an active account and return a session token for it.

        Raises DuplicateEmailError if the email is taken; nothing is written then.
        """
        user = self.create_account(name, email, password)
        return self._auth_response(user)

    def create_account(self, name: str, email: str, password: str, active: bool = True) -> User:
        """Insert one user row with a hashed password; no token is issued."""
        if self.store.exists_by_email(email):
            logger.info("Registration rejected", extra={"reason": "duplicate_email"})
            raise DuplicateEmailError()

        user = User(
            name=name,
            email=email,
            password_hash=self.hasher.hash(password),
            active=active,
        )
        user = self.store.save(user)
        logger.info("User registered", extra={"user_id": user.id, "active": active})
        return user

    def login(self, email: str, password: str) -> AuthResponse:
        """
        Check credentials and return a session token.

        The active flag is checked before the password, so an inactive
        account's password is never verified.
        """
        user = self.store.find_by_email(email)
        if user is None:
            logger.warning("Login rejected", extra={"reason": "unknown_email"})
            raise InvalidCredentialsError()
        if not user.active:
            logger.warning("Login rejected", extra={"reason": "inactive", "user_id": user.id})
            raise InactiveAccountError()
        if not self.hasher.verify(password, user.password_hash):
            logger.warning("Login rejected", extra={"reason": "bad_password", "user_id": user.id})
            raise InvalidCredentialsError()

        logger.info("User logged in", extra={"user_id": user.id})
        return self._auth_response(user)

    def get_profile(self, user_id: int) -> UserProfile:
        """Return the public fields of a user; raises UserNotFoundError if unknown."""
        user = self.store.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        return UserProfile.model_validate(user)

    def _auth_response(self, user: User) -> AuthResponse:
        token = self.issuer.issue(user.email, user.id)
        return AuthResponse(token=token, user_id=user.id, name=user.name, email=user.email)
