"""
Credential store (raw SQL).

Rows returned from here that carry `password_hash` must never reach a
response; services map them through `schemas.UserResponse`.
"""

from __future__ import annotations

from core import db


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(*, username: str, email: str, password_hash: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (username, email, password_hash)
        VALUES ($1, $2, $3)
        RETURNING id, username, email, created_at
        """,
        username,
        email,
        password_hash,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def find_user_by_email_or_username(*, email: str, username: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, email
        FROM users
        WHERE lower(email) = lower($1)
           OR username = $2
        LIMIT 1
        """,
        email,
        username,
    )


async def get_user_by_email(email: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, email, password_hash
        FROM users
        WHERE lower(email) = lower($1)
        """,
        email,
    )


async def get_user_by_id(user_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, email, created_at
        FROM users
        WHERE id = $1
        """,
        user_id,
    )
