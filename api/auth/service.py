"""
Auth business logic: registration, login and the current identity.
"""

from __future__ import annotations

import logging

from core.errors import (
    DUPLICATE_IDENTITY_MESSAGE,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    store_errors,
)

from . import repository, schemas
from .security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        username=str(user_row["username"]),
        email=str(user_row["email"]),
    )


async def register(payload: dict, *, hasher: PasswordHasher) -> schemas.RegisterResponse:
    username = str(payload["username"]).strip()
    email = repository.normalize_email(payload["email"])

    with store_errors("Failed to register user"):
        existing = await repository.find_user_by_email_or_username(email=email, username=username)
        if existing is not None:
            raise ConflictError(DUPLICATE_IDENTITY_MESSAGE)

        password_hash = await hasher.hash(payload["password"])
        user_row = await repository.create_user(
            username=username,
            email=email,
            password_hash=password_hash,
        )

    logger.info("user_registered user_id=%s", user_row["id"])
    return schemas.RegisterResponse(user=_to_user_response(user_row))


async def login(payload: dict, *, hasher: PasswordHasher, tokens: TokenService) -> schemas.LoginResponse:
    email = repository.normalize_email(payload["email"])

    with store_errors("Failed to log in"):
        user_row = await repository.get_user_by_email(email)
        if user_row is None:
            raise InvalidCredentialsError()

        is_valid = await hasher.verify(str(payload["password"]), user_row.get("password_hash"))
        if not is_valid:
            logger.info("login_rejected user_id=%s", user_row["id"])
            raise InvalidCredentialsError()

        token = tokens.issue(int(user_row["id"]))

    return schemas.LoginResponse(user=_to_user_response(user_row), token=token)


async def me(identity_id: int) -> schemas.UserResponse:
    with store_errors("Failed to fetch user"):
        user_row = await repository.get_user_by_id(identity_id)
    if user_row is None:
        raise NotFoundError("User not found")
    return _to_user_response(user_row)
