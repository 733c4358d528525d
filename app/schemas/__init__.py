"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserProfile,
    ValidationErrorResponse,
)
from app.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserProfile",
    "ValidationErrorResponse",
]
