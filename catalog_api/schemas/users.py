"""Pydantic schemas for user registration and token login."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from catalog_api.utils.sanitizer import clean_string

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterUserRequest(BaseModel):
    """Registration payload."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        pattern=r"^[A-Za-z0-9_.-]+$",
        description="Unique login name (letters, digits, '_', '.', '-').",
    )
    email: str = Field(
        ...,
        max_length=254,
        pattern=EMAIL_PATTERN,
        description="Unique contact email address.",
    )
    password: str = Field(
        ...,
        min_length=8,
        description="Plaintext password; stored only as a bcrypt hash.",
    )

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > 72:
            raise ValueError("password must be at most 72 bytes")
        return value

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return clean_string(value).lower()


class RegisterUserResponse(BaseModel):
    """Registration result. The API key is only ever returned here."""

    id: int
    username: str
    email: str
    api_key: str = Field(..., description="Long-lived API key (send as 'Authorization: Bearer <key>').")


class TokenRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=256)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds.")


class CurrentUserResponse(BaseModel):
    user_id: int | str
