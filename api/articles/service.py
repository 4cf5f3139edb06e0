"""
Article business logic.
"""

from __future__ import annotations

import logging

from core.errors import NotFoundError, OwnershipError, store_errors

from . import repository

logger = logging.getLogger(__name__)

ARTICLE_NOT_FOUND = "article not found"
NOT_FOUND_OR_NOT_OWNED = "Article not found or unauthorized"


def _to_article(row: dict) -> dict:
    article = {
        "id": int(row["id"]),
        "title": str(row["title"]),
        "body": str(row["body"]),
        "category": row.get("category"),
        "submitted_by": int(row["submitted_by"]),
        "created_at": row.get("created_at"),
    }
    if "username" in row:
        article["username"] = str(row["username"])
        article["email"] = str(row["email"])
    return article


def _clean(value: object) -> str | None:
    return str(value).strip() if value is not None else None


async def list_articles() -> list[dict]:
    with store_errors("Failed to fetch articles"):
        rows = await repository.list_articles()
    return [_to_article(row) for row in rows]


async def get_article(article_id: int) -> dict:
    with store_errors("Failed to fetch article"):
        row = await repository.get_article(article_id)
    if row is None:
        raise NotFoundError(ARTICLE_NOT_FOUND)
    return _to_article(row)


async def create_article(payload: dict, *, identity_id: int) -> dict:
    with store_errors("Failed to create article"):
        row = await repository.create_article(
            title=str(payload["title"]).strip(),
            body=str(payload["body"]),
            category=_clean(payload.get("category")),
            owner_id=identity_id,
        )
    logger.info("article_created article_id=%s owner_id=%s", row["id"], identity_id)
    return _to_article(row)


async def update_article(article_id: int, payload: dict, *, identity_id: int) -> dict:
    """Serve both PUT and PATCH. Absent fields keep their stored value, so a
    PUT without ``category`` leaves the category as it was."""
    title = payload.get("title")
    body = payload.get("body")
    with store_errors("Failed to update article"):
        row = await repository.update_article(
            article_id,
            owner_id=identity_id,
            title=_clean(title),
            body=str(body) if body is not None else None,
            category=_clean(payload.get("category")),
        )
    if row is None:
        logger.info("article_update_refused article_id=%s identity_id=%s", article_id, identity_id)
        raise OwnershipError(NOT_FOUND_OR_NOT_OWNED)
    return _to_article(row)


async def delete_article(article_id: int, *, identity_id: int) -> None:
    with store_errors("Failed to delete article"):
        deleted = await repository.delete_article(article_id, owner_id=identity_id)
    if not deleted:
        logger.info("article_delete_refused article_id=%s identity_id=%s", article_id, identity_id)
        raise OwnershipError(NOT_FOUND_OR_NOT_OWNED)
