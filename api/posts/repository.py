"""
Post persistence (raw SQL).
"""

from __future__ import annotations

from core import db

POST_COLUMNS = "id, title, content, user_id, created_at"


async def list_posts() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT posts.id, posts.title, posts.content, posts.user_id, posts.created_at,
               users.username, users.email
        FROM posts
        INNER JOIN users ON posts.user_id = users.id
        ORDER BY posts.created_at DESC
        """
    )


async def get_post(post_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT posts.id, posts.title, posts.content, posts.user_id, posts.created_at,
               users.username, users.email
        FROM posts
        INNER JOIN users ON posts.user_id = users.id
        WHERE posts.id = $1
        """,
        post_id,
    )


async def create_post(*, title: str, content: str, owner_id: int) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO posts (title, content, user_id)
        VALUES ($1, $2, $3)
        RETURNING {POST_COLUMNS}
        """,
        title,
        content,
        owner_id,
    )
    if row is None:
        raise RuntimeError("Failed to create post.")
    return row


async def update_post(
    post_id: int,
    *,
    owner_id: int,
    title: str | None = None,
    content: str | None = None,
) -> dict | None:
    return await db.fetch_one(
        f"""
        UPDATE posts
        SET title = COALESCE($3, title),
            content = COALESCE($4, content)
        WHERE id = $1
          AND user_id = $2
        RETURNING {POST_COLUMNS}
        """,
        post_id,
        owner_id,
        title,
        content,
    )


async def delete_post(post_id: int, *, owner_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM posts
        WHERE id = $1
          AND user_id = $2
        RETURNING id
        """,
        post_id,
        owner_id,
    )
    return row is not None
