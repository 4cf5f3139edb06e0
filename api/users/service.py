"""
User profile business logic.

Users own themselves: an identity may only update or delete its own record.
Any other target answers "User not found", the same as a missing id.
"""

from __future__ import annotations

import logging

from auth.repository import normalize_email
from core.errors import NotFoundError, OwnershipError, store_errors
from posts.service import to_post

from . import repository

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


def _to_user(row: dict) -> dict:
    return {
        "id": int(row["id"]),
        "username": str(row["username"]),
        "email": str(row["email"]),
    }


def _ensure_self(user_id: int, identity_id: int) -> None:
    if user_id != identity_id:
        logger.info("user_ownership_denied user_id=%s identity_id=%s", user_id, identity_id)
        raise OwnershipError(USER_NOT_FOUND)


async def list_users() -> list[dict]:
    with store_errors("Failed to retrieve users"):
        rows = await repository.list_users()
    return [_to_user(row) for row in rows]


async def get_user(user_id: int) -> dict:
    with store_errors("Failed to fetch user"):
        row = await repository.get_user(user_id)
    if row is None:
        raise NotFoundError(USER_NOT_FOUND)
    return _to_user(row)


async def create_user(payload: dict) -> dict:
    with store_errors("Failed to create user"):
        row = await repository.create_user(
            username=str(payload["username"]).strip(),
            email=normalize_email(payload["email"]),
        )
    return _to_user(row)


async def replace_user(user_id: int, payload: dict, *, identity_id: int) -> dict:
    _ensure_self(user_id, identity_id)
    with store_errors("Failed to update user"):
        row = await repository.update_user(
            user_id,
            username=str(payload["username"]).strip(),
            email=normalize_email(payload["email"]),
        )
    if row is None:
        raise NotFoundError(USER_NOT_FOUND)
    return _to_user(row)


async def patch_user(user_id: int, payload: dict, *, identity_id: int) -> dict:
    _ensure_self(user_id, identity_id)
    username = payload.get("username")
    email = payload.get("email")
    with store_errors("Failed to update user"):
        row = await repository.update_user(
            user_id,
            username=str(username).strip() if username is not None else None,
            email=normalize_email(email) if email is not None else None,
        )
    if row is None:
        raise NotFoundError(USER_NOT_FOUND)
    return _to_user(row)


async def delete_user(user_id: int, *, identity_id: int) -> dict:
    _ensure_self(user_id, identity_id)
    with store_errors("Failed to delete user"):
        deleted = await repository.delete_user(user_id)
    if not deleted:
        raise NotFoundError(USER_NOT_FOUND)
    logger.info("user_deleted user_id=%s", user_id)
    return {"message": "User deleted successfully"}


async def list_posts(user_id: int, *, with_user: bool = False) -> list[dict]:
    with store_errors("Failed to fetch user posts"):
        if with_user:
            rows = await repository.list_posts_with_user(user_id)
        else:
            rows = await repository.list_posts_for_user(user_id)
    return [to_post(row) for row in rows]
