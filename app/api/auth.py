"""Register, login and current-profile endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_auth_service, get_current_user_id
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserProfile,
    ValidationErrorResponse,
)
from app.services.auth import (
    AuthError,
    AuthService,
    DuplicateEmailError,
    InactiveAccountError,
    InvalidCredentialsError,
    UserNotFoundError,
)

router = APIRouter()

# Domain error -> HTTP status. Inactive accounts get 401 like bad credentials.
ERROR_STATUS: dict[type[AuthError], int] = {
    DuplicateEmailError: status.HTTP_409_CONFLICT,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    InactiveAccountError: status.HTTP_401_UNAUTHORIZED,
    UserNotFoundError: status.HTTP_404_NOT_FOUND,
}

VALIDATION_RESPONSE = {
    status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse},
}


def _http_error(e: AuthError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS.get(type(e), status.HTTP_400_BAD_REQUEST),
        detail=e.message,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses=VALIDATION_RESPONSE,
)
def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """Create an account and return a session token. 409 if the email is taken."""
    try:
        return service.register(body.name, body.email, body.password)
    except AuthError as e:
        raise _http_error(e) from e


@router.post("/login", response_model=AuthResponse, responses=VALIDATION_RESPONSE)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT session token.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        return service.login(body.email, body.password)
    except AuthError as e:
        raise _http_error(e) from e


@router.get("/me", response_model=UserProfile)
def me(
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserProfile:
    """Return the caller's public profile."""
    try:
        return service.get_profile(user_id)
    except AuthError as e:
        raise _http_error(e) from e
