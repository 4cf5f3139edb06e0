"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI opens it on startup and closes
it on shutdown (see `api/main.py`).

Connection parameters come from `DATABASE_URL`, or, when that is unset, from
the discrete `DB_HOST` / `DB_PORT` / `DB_USER` / `DB_PASSWORD` / `DB_NAME`
variables.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

import asyncpg

_pool: asyncpg.Pool | None = None


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _url_from_parts() -> str | None:
    name = os.environ.get("DB_NAME", "").strip()
    if not name:
        return None
    host = os.environ.get("DB_HOST", "").strip() or "localhost"
    port = os.environ.get("DB_PORT", "").strip() or "5432"
    user = quote(os.environ.get("DB_USER", "").strip() or "postgres", safe="")
    password = os.environ.get("DB_PASSWORD", "")
    auth = f"{user}:{quote(password, safe='')}" if password else user
    return f"postgresql://{auth}@{host}:{port}/{name}"


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip() or _url_from_parts()
    if not url:
        raise RuntimeError("DATABASE_URL (or DB_NAME) is not set.")
    return _sanitize_database_url(url)


def _pool_size(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw.isdigit() else default


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=_pool_size("DB_POOL_MIN", 1),
        max_size=_pool_size("DB_POOL_MAX", 10),
        command_timeout=30,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).

    Mutations use `RETURNING ...` with this helper, so `None` means no row
    matched the statement.
    """
    row = await pool().fetchrow(sql, *args)
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    rows = await pool().fetch(sql, *args)
    return [dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> str:
    """
    Run a statement and return asyncpg's status tag (e.g. "DELETE 1").
    """
    return await pool().execute(sql, *args)
