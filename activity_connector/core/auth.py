"""Personal access token authentication.

Callers send ``Authorization: Bearer <PAT>`` or ``Authorization: token <PAT>``
for the username in the request path. The token is checked against the
digest stored for that username.

Design principles:
- Fail closed: unknown users, wrong tokens and store faults all reject
- No user enumeration: unknown user and wrong token share one message
- Dependency Injection: used via FastAPI Depends() so tests can swap the store
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated

from fastapi import Depends, Header

from activity_connector.adapters.store.base import AbstractActivityStore
from activity_connector.adapters.store.factory import get_store
from activity_connector.core.errors import AuthenticationAppError
from activity_connector.services.credential_service import CredentialVerifier

logger = logging.getLogger(__name__)

_TOKEN_SCHEMES = ("Bearer ", "token ")

MISSING_HEADER_MESSAGE = "Missing or invalid Authorization header"
INVALID_TOKEN_MESSAGE = "Invalid Personal Access Token"


def extract_token(authorization: str | None) -> str | None:
    """Extract the PAT from an Authorization header value.

    Args:
        authorization: Raw header value, or None.

    Returns:
        The trimmed token, or None when the header is absent or malformed.

    Examples:
        >>> extract_token("Bearer ghp_abc")
        'ghp_abc'
        >>> extract_token("token  ghp_abc ")
        'ghp_abc'
        >>> extract_token("Basic dXNlcjpwYXNz") is None
        True
        >>> extract_token(None) is None
        True
    """
    if not authorization or not authorization.strip():
        return None

    for scheme in _TOKEN_SCHEMES:
        if authorization.startswith(scheme):
            token = authorization[len(scheme):].strip()
            return token or None
    return None


def _token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()[:16]


async def authenticate(
    verifier: CredentialVerifier,
    username: str,
    authorization: str | None,
) -> None:
    """Validate the Authorization header for ``username``.

    Pure validation logic without FastAPI dependencies for easy testing.

    Raises:
        AuthenticationAppError: If the header is missing/malformed or the
            token does not match the stored digest.
    """
    token = extract_token(authorization)
    if token is None:
        logger.warning(
            "auth.missing_token",
            extra={"username": username, "header_present": bool(authorization)},
        )
        raise AuthenticationAppError(code="missing_token", message=MISSING_HEADER_MESSAGE)

    if not await verifier.verify(username, token):
        logger.warning(
            "auth.invalid_token",
            extra={"username": username, "token_fingerprint": _token_fingerprint(token)},
        )
        raise AuthenticationAppError(
            code="invalid_token",
            message=INVALID_TOKEN_MESSAGE,
            details={"username": username},
        )

    logger.info(
        "auth.success",
        extra={"username": username, "token_fingerprint": _token_fingerprint(token)},
    )


async def verify_credentials(
    username: str,
    authorization: Annotated[str | None, Header()] = None,
    store: AbstractActivityStore = Depends(get_store),
) -> str:
    """FastAPI dependency authenticating the caller as ``username``.

    ``username`` is taken from the route path.

    Usage:
        @router.get("/activity/{username}", dependencies=[Depends(verify_credentials)])

    Returns:
        The authenticated username.

    Raises:
        AuthenticationAppError: Rendered as 401 by the exception handlers.
    """
    await authenticate(CredentialVerifier(store), username, authorization)
    return username
