"""
Auth dependencies for protected FastAPI routes.

A request starts `Unauthenticated`. It becomes `Authenticated(identity_id)`
only when the bearer token verifies; any failure ends the request with 401
before the route handler runs. Ownership is not checked here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Request

from core.errors import AuthError, AuthFailure

from .security import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authenticated:
    identity_id: int


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise AuthError(AuthFailure.MISSING)

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise AuthError(AuthFailure.MALFORMED)

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise AuthError(AuthFailure.MALFORMED)
    return token


def authenticate(authorization: str | None, tokens: TokenService) -> Authenticated:
    token = _extract_bearer_token(authorization)
    return Authenticated(identity_id=tokens.verify(token))


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_identity(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> Authenticated:
    try:
        identity = authenticate(request.headers.get("Authorization"), tokens)
    except AuthError as exc:
        logger.info(
            "auth_rejected method=%s path=%s reason=%s",
            request.method,
            request.url.path,
            exc.reason.value,
        )
        raise
    request.state.identity_id = identity.identity_id
    return identity
