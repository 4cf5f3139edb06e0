"""
User profile persistence (raw SQL).

Every query lists its columns explicitly; `password_hash` is never selected
here.
"""

from __future__ import annotations

from core import db

USER_COLUMNS = "id, username, email, created_at"


async def list_users() -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        ORDER BY id ASC
        """
    )


async def get_user(user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def create_user(*, username: str, email: str) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (username, email)
        VALUES ($1, $2)
        RETURNING {USER_COLUMNS}
        """,
        username,
        email,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def update_user(user_id: int, *, username: str | None = None, email: str | None = None) -> dict | None:
    """
    Update the given fields; `None` leaves a column as it is.

    Returns the updated row, or None when no user has this id.
    """
    return await db.fetch_one(
        f"""
        UPDATE users
        SET username = COALESCE($2, username),
            email = COALESCE($3, email)
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        user_id,
        username,
        email,
    )


async def delete_user(user_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM users
        WHERE id = $1
        RETURNING id
        """,
        user_id,
    )
    return row is not None


async def list_posts_for_user(user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT posts.id, posts.title, posts.content, posts.user_id, posts.created_at
        FROM posts
        WHERE posts.user_id = $1
        ORDER BY posts.created_at DESC
        """,
        user_id,
    )


async def list_posts_with_user(user_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT posts.id, posts.title, posts.content, posts.user_id, posts.created_at,
               users.username, users.email
        FROM posts
        INNER JOIN users ON posts.user_id = users.id
        WHERE users.id = $1
        ORDER BY posts.created_at DESC
        """,
        user_id,
    )
