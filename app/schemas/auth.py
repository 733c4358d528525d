"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.config import get_settings

PASSWORD_MAX_LEN = 128
NAME_MAX_LEN = 255


def _require_not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be blank")
    return value


class RegisterRequest(BaseModel):
    """New account details."""

    name: str = Field(..., max_length=NAME_MAX_LEN, description="Display name")
    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Password")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = _require_not_blank(v).strip()
        min_len = get_settings().NAME_MIN_LENGTH
        if len(v) < min_len:
            raise ValueError(f"must be at least {min_len} characters")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        _require_not_blank(v)
        min_len = get_settings().PASSWORD_MIN_LENGTH
        if len(v) < min_len:
            raise ValueError(f"must be at least {min_len} characters")
        return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., max_length=PASSWORD_MAX_LEN, description="Password")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _require_not_blank(v)


class AuthResponse(BaseModel):
    """Session token and account summary returned by register and login."""

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., description="Signed JWT; send as Authorization: Bearer <token>")
    user_id: int = Field(..., alias="userId", description="User id")
    name: str
    email: str


class UserProfile(BaseModel):
    """Public profile of a user (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    active: bool


class ValidationErrorResponse(BaseModel):
    """Body of a 400 response: one message per offending field."""

    detail: str = "Validation failed"
    errors: dict[str, str] = Field(default_factory=dict)
