"""Caller authentication for protected routes.

This module resolves the presented credential to an identity through the
app's CredentialVerifier and feeds failures back into the admission
controller's lockout tracking.

Credentials are read from ``Authorization: Bearer <credential>`` or, when
that header is absent, from ``X-API-Token``. API keys (``rk_...``) and signed
access tokens share the same header; the verifier tells them apart by prefix.

Every failure mode (missing, unknown, expired, malformed) produces the same
401 response so clients cannot tell which check failed.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header, Request

from catalog_api.adapters.users.base import AbstractUserDirectory
from catalog_api.core.admission import client_id_for, get_admission_controller
from catalog_api.core.errors import AuthenticationAppError
from catalog_api.core.logging import fingerprint
from catalog_api.core.security import AuthenticatedIdentity, CredentialVerifier

logger = logging.getLogger(__name__)


def unauthenticated_error() -> AuthenticationAppError:
    return AuthenticationAppError(
        code="unauthenticated",
        message="Authentication required. Provide a valid API key or access token.",
    )


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the credential from an ``Authorization`` header value.

    Examples:
        >>> parse_bearer("Bearer rk_abc")
        'rk_abc'
        >>> parse_bearer("bearer  token ")
        'token'
        >>> parse_bearer("Basic dXNlcg==") is None
        True
        >>> parse_bearer(None) is None
        True
    """
    if not authorization:
        return None

    scheme, _, value = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return value.strip() or None


def extract_credential(authorization: str | None, x_api_token: str | None) -> str | None:
    """Pick the presented credential: Authorization first, then X-API-Token."""
    credential = parse_bearer(authorization)
    if credential:
        return credential
    if x_api_token and x_api_token.strip():
        return x_api_token.strip()
    return None


def get_credential_verifier(request: Request) -> CredentialVerifier:
    return request.app.state.verifier


def get_user_directory(request: Request) -> AbstractUserDirectory:
    return request.app.state.users


def record_auth_failure(request: Request, reason: str) -> None:
    """Count a failed authentication against the requesting client."""
    client_id = client_id_for(request)
    get_admission_controller(request).record_auth_failure(client_id)
    logger.warning(
        "auth.failed",
        extra={
            "reason": reason,
            "client_hash": fingerprint(client_id),
            "request_path": request.url.path,
        },
    )


def record_auth_success(request: Request) -> None:
    get_admission_controller(request).record_auth_success(client_id_for(request))


def require_identity(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    x_api_token: Annotated[str | None, Header(alias="X-API-Token")] = None,
) -> AuthenticatedIdentity:
    """FastAPI dependency returning the authenticated caller.

    Declared sync so FastAPI runs it in the threadpool: the user lookup may
    block and the admission controller uses thread locks.

    Usage:
        @router.post("/protected")
        def protected(identity: AuthenticatedIdentity = Depends(require_identity)):
            return {"user_id": identity.user_id}

    Raises:
        AuthenticationAppError: 401 when no valid credential was presented.
    """
    credential = extract_credential(authorization, x_api_token)
    if credential is None:
        record_auth_failure(request, reason="missing_credential")
        raise unauthenticated_error()

    verifier = get_credential_verifier(request)
    users = get_user_directory(request)

    identity = verifier.authenticate(credential, users.find_by_api_key)
    if identity is None:
        record_auth_failure(request, reason="invalid_credential")
        raise unauthenticated_error()

    record_auth_success(request)
    logger.info(
        "auth.success",
        extra={
            "user_id": identity.user_id,
            "credential_kind": verifier.classify(credential).value,
        },
    )
    return identity


CurrentIdentity = Annotated[AuthenticatedIdentity, Depends(require_identity)]
