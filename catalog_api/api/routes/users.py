"""User registration, token login and identity routes."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

from catalog_api.core.auth import CurrentIdentity, record_auth_failure, record_auth_success, unauthenticated_error
from catalog_api.schemas.users import (
    CurrentUserResponse,
    RegisterUserRequest,
    RegisterUserResponse,
    TokenRequest,
    TokenResponse,
)
from catalog_api.services.user_service import UserService

router = APIRouter(tags=["Users"])


def _user_service(request: Request) -> UserService:
    return request.app.state.user_service


@router.post(
    "/users/register",
    response_model=RegisterUserResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_user(payload: RegisterUserRequest, request: Request) -> RegisterUserResponse:
    """Register a new user and return its API key.

    The password is hashed with bcrypt before storage; the API key is shown
    only in this response.

    Raises:
        ConflictAppError: 409 if the username or email is already registered.
    """
    user = _user_service(request).register(payload)
    return RegisterUserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        api_key=user.api_key,
    )


@router.post("/auth/token", response_model=TokenResponse)
def issue_token(payload: TokenRequest, request: Request) -> TokenResponse:
    """Exchange username and password for a short-lived access token.

    A wrong username or password counts as one authentication failure
    against the calling client.
    """
    service = _user_service(request)
    token = service.login(payload.username, payload.password)
    if token is None:
        record_auth_failure(request, reason="bad_password")
        raise unauthenticated_error()

    record_auth_success(request)
    return TokenResponse(access_token=token, expires_in=service.token_ttl_seconds)


@router.get("/users/me", response_model=CurrentUserResponse)
async def current_user(identity: CurrentIdentity) -> CurrentUserResponse:
    """Return the identity resolved from the presented credential."""
    return CurrentUserResponse(user_id=identity.user_id)
