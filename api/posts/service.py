"""
Post business logic.
"""

from __future__ import annotations

import logging

from core.errors import NotFoundError, OwnershipError, store_errors

from . import repository

logger = logging.getLogger(__name__)

NOT_FOUND_OR_NOT_OWNED = "Post not found or unauthorized"


def to_post(row: dict) -> dict:
    post = {
        "id": int(row["id"]),
        "title": str(row["title"]),
        "content": str(row["content"]),
        "user_id": int(row["user_id"]),
        "created_at": row.get("created_at"),
    }
    if "username" in row:
        post["username"] = str(row["username"])
        post["email"] = str(row["email"])
    return post


async def list_posts() -> list[dict]:
    with store_errors("Failed to fetch posts"):
        rows = await repository.list_posts()
    return [to_post(row) for row in rows]


async def get_post(post_id: int) -> dict:
    with store_errors("Failed to fetch post"):
        row = await repository.get_post(post_id)
    if row is None:
        raise NotFoundError("Post not found")
    return to_post(row)


async def create_post(payload: dict, *, identity_id: int) -> dict:
    with store_errors("Failed to create post"):
        row = await repository.create_post(
            title=str(payload["title"]).strip(),
            content=str(payload["content"]),
            owner_id=identity_id,
        )
    logger.info("post_created post_id=%s owner_id=%s", row["id"], identity_id)
    return to_post(row)


async def update_post(post_id: int, payload: dict, *, identity_id: int) -> dict:
    title = payload.get("title")
    content = payload.get("content")
    with store_errors("Failed to update post"):
        row = await repository.update_post(
            post_id,
            owner_id=identity_id,
            title=str(title).strip() if title is not None else None,
            content=str(content) if content is not None else None,
        )
    if row is None:
        raise OwnershipError(NOT_FOUND_OR_NOT_OWNED)
    return to_post(row)


async def delete_post(post_id: int, *, identity_id: int) -> None:
    with store_errors("Failed to delete post"):
        deleted = await repository.delete_post(post_id, owner_id=identity_id)
    if not deleted:
        raise OwnershipError(NOT_FOUND_OR_NOT_OWNED)
