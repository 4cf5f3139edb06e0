"""
Article persistence (raw SQL).

Update and delete statements match on both the article id and its owner
(`submitted_by`), so a `None` result covers "missing" and "not yours" alike.
"""

from __future__ import annotations

from core import db

ARTICLE_COLUMNS = "id, title, body, category, submitted_by, created_at"


async def list_articles() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT articles.id, articles.title, articles.body, articles.category,
               articles.submitted_by, articles.created_at,
               users.username, users.email
        FROM articles
        INNER JOIN users ON articles.submitted_by = users.id
        ORDER BY articles.created_at DESC
        """
    )


async def get_article(article_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT articles.id, articles.title, articles.body, articles.category,
               articles.submitted_by, articles.created_at,
               users.username, users.email
        FROM articles
        INNER JOIN users ON articles.submitted_by = users.id
        WHERE articles.id = $1
        """,
        article_id,
    )


async def create_article(*, title: str, body: str, category: str | None, owner_id: int) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO articles (title, body, category, submitted_by)
        VALUES ($1, $2, $3, $4)
        RETURNING {ARTICLE_COLUMNS}
        """,
        title,
        body,
        category,
        owner_id,
    )
    if row is None:
        raise RuntimeError("Failed to create article.")
    return row


async def update_article(
    article_id: int,
    *,
    owner_id: int,
    title: str | None = None,
    body: str | None = None,
    category: str | None = None,
) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE articles
        SET title = COALESCE($3, title),
            body = COALESCE($4, body),
            category = COALESCE($5, category)
        WHERE id = $1
          AND submitted_by = $2
        RETURNING {ARTICLE_COLUMNS}
        """,
        article_id,
        owner_id,
        title,
        body,
        category,
    )


async def delete_article(article_id: int, *, owner_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM articles
        WHERE id = $1
          AND submitted_by = $2
        RETURNING id
        """,
        article_id,
        owner_id,
    )
    return row is not None
