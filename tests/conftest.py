"""Test fixtures: an in-memory store in place of PostgreSQL.

The repository modules are the only code that talks to the database, so the
fixtures swap their functions for an in-memory `FakeStore`. Everything above
them (routers, validation, auth, services, error handling) runs for real
through an `httpx.AsyncClient` bound to the ASGI app.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timezone

import asyncpg
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from articles import repository as articles_repository
from auth import repository as auth_repository
from core.settings import Settings
from main import create_app
from posts import repository as posts_repository
from users import repository as users_repository

TEST_SETTINGS = Settings(
    jwt_secret="test-signing-secret-with-enough-bytes-for-hs256",
    bcrypt_rounds=4,
    environment="test",
    log_level="WARNING",
)

PASSWORD = "s3cret-pass"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _public_user(row: dict) -> dict:
    return {key: row[key] for key in ("id", "username", "email", "created_at")}


class FakeStore:
    """In-memory stand-in for the users/articles/posts tables."""

    def __init__(self) -> None:
        self.users: dict[int, dict] = {}
        self.articles: dict[int, dict] = {}
        self.posts: dict[int, dict] = {}
        self.calls: list[str] = []
        self.fail_with: Exception | None = None
        self._user_ids = itertools.count(1)
        self._article_ids = itertools.count(1)
        self._post_ids = itertools.count(1)

    def _touch(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def _check_unique(self, *, username: str | None, email: str | None, ignore_id: int | None = None) -> None:
        for row in self.users.values():
            if row["id"] == ignore_id:
                continue
            if username is not None and row["username"] == username:
                raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
            if email is not None and row["email"].lower() == email.lower():
                raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")

    def _with_owner(self, row: dict, owner_field: str) -> dict | None:
        owner = self.users.get(row[owner_field])
        if owner is None:
            return None
        return {**row, "username": owner["username"], "email": owner["email"]}

    # credential store

    async def insert_user(self, *, username: str, email: str, password_hash: str | None = None) -> dict:
        self._touch("insert_user")
        self._check_unique(username=username, email=email)
        user_id = next(self._user_ids)
        self.users[user_id] = {
            "id": user_id,
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "created_at": _now(),
        }
        return _public_user(self.users[user_id])

    async def find_user_by_email_or_username(self, *, email: str, username: str) -> dict | None:
        self._touch("find_user_by_email_or_username")
        for row in self.users.values():
            if row["email"].lower() == email.lower() or row["username"] == username:
                return _public_user(row)
        return None

    async def get_user_by_email(self, email: str) -> dict | None:
        self._touch("get_user_by_email")
        for row in self.users.values():
            if row["email"].lower() == email.lower():
                return dict(row)
        return None

    async def get_user(self, user_id: int) -> dict | None:
        self._touch("get_user")
        row = self.users.get(user_id)
        return _public_user(row) if row is not None else None

    # users

    async def list_users(self) -> list[dict]:
        self._touch("list_users")
        return [_public_user(row) for row in sorted(self.users.values(), key=lambda r: r["id"])]

    async def update_user(self, user_id: int, *, username: str | None = None, email: str | None = None) -> dict | None:
        self._touch("update_user")
        row = self.users.get(user_id)
        if row is None:
            return None
        self._check_unique(username=username, email=email, ignore_id=user_id)
        if username is not None:
            row["username"] = username
        if email is not None:
            row["email"] = email
        return _public_user(row)

    async def delete_user(self, user_id: int) -> bool:
        self._touch("delete_user")
        return self.users.pop(user_id, None) is not None

    async def list_posts_for_user(self, user_id: int) -> list[dict]:
        self._touch("list_posts_for_user")
        return [dict(row) for row in self.posts.values() if row["user_id"] == user_id]

    async def list_posts_with_user(self, user_id: int) -> list[dict]:
        self._touch("list_posts_with_user")
        rows = [self._with_owner(row, "user_id") for row in self.posts.values() if row["user_id"] == user_id]
        return [row for row in rows if row is not None]

    # articles

    async def list_articles(self) -> list[dict]:
        self._touch("list_articles")
        rows = [self._with_owner(row, "submitted_by") for row in self.articles.values()]
        return [row for row in rows if row is not None]

    async def get_article(self, article_id: int) -> dict | None:
        self._touch("get_article")
        row = self.articles.get(article_id)
        return self._with_owner(row, "submitted_by") if row is not None else None

    async def create_article(self, *, title: str, body: str, category: str | None, owner_id: int) -> dict:
        self._touch("create_article")
        article_id = next(self._article_ids)
        self.articles[article_id] = {
            "id": article_id,
            "title": title,
            "body": body,
            "category": category,
            "submitted_by": owner_id,
            "created_at": _now(),
        }
        return dict(self.articles[article_id])

    async def update_article(
        self,
        article_id: int,
        *,
        owner_id: int,
        title: str | None = None,
        body: str | None = None,
        category: str | None = None,
    ) -> dict | None:
        self._touch("update_article")
        row = self.articles.get(article_id)
        if row is None or row["submitted_by"] != owner_id:
            return None
        for key, value in (("title", title), ("body", body), ("category", category)):
            if value is not None:
                row[key] = value
        return dict(row)

    async def delete_article(self, article_id: int, *, owner_id: int) -> bool:
        self._touch("delete_article")
        row = self.articles.get(article_id)
        if row is None or row["submitted_by"] != owner_id:
            return False
        del self.articles[article_id]
        return True

    # posts

    async def list_posts(self) -> list[dict]:
        self._touch("list_posts")
        rows = [self._with_owner(row, "user_id") for row in self.posts.values()]
        return [row for row in rows if row is not None]

    async def get_post(self, post_id: int) -> dict | None:
        self._touch("get_post")
        row = self.posts.get(post_id)
        return self._with_owner(row, "user_id") if row is not None else None

    async def create_post(self, *, title: str, content: str, owner_id: int) -> dict:
        self._touch("create_post")
        post_id = next(self._post_ids)
        self.posts[post_id] = {
            "id": post_id,
            "title": title,
            "content": content,
            "user_id": owner_id,
            "created_at": _now(),
        }
        return dict(self.posts[post_id])

    async def update_post(
        self,
        post_id: int,
        *,
        owner_id: int,
        title: str | None = None,
        content: str | None = None,
    ) -> dict | None:
        self._touch("update_post")
        row = self.posts.get(post_id)
        if row is None or row["user_id"] != owner_id:
            return None
        if title is not None:
            row["title"] = title
        if content is not None:
            row["content"] = content
        return dict(row)

    async def delete_post(self, post_id: int, *, owner_id: int) -> bool:
        self._touch("delete_post")
        row = self.posts.get(post_id)
        if row is None or row["user_id"] != owner_id:
            return False
        del self.posts[post_id]
        return True


@pytest.fixture()
def store(monkeypatch) -> FakeStore:
    fake = FakeStore()

    monkeypatch.setattr(auth_repository, "create_user", fake.insert_user)
    monkeypatch.setattr(auth_repository, "find_user_by_email_or_username", fake.find_user_by_email_or_username)
    monkeypatch.setattr(auth_repository, "get_user_by_email", fake.get_user_by_email)
    monkeypatch.setattr(auth_repository, "get_user_by_id", fake.get_user)

    monkeypatch.setattr(users_repository, "list_users", fake.list_users)
    monkeypatch.setattr(users_repository, "get_user", fake.get_user)
    monkeypatch.setattr(users_repository, "create_user", fake.insert_user)
    monkeypatch.setattr(users_repository, "update_user", fake.update_user)
    monkeypatch.setattr(users_repository, "delete_user", fake.delete_user)
    monkeypatch.setattr(users_repository, "list_posts_for_user", fake.list_posts_for_user)
    monkeypatch.setattr(users_repository, "list_posts_with_user", fake.list_posts_with_user)

    monkeypatch.setattr(articles_repository, "list_articles", fake.list_articles)
    monkeypatch.setattr(articles_repository, "get_article", fake.get_article)
    monkeypatch.setattr(articles_repository, "create_article", fake.create_article)
    monkeypatch.setattr(articles_repository, "update_article", fake.update_article)
    monkeypatch.setattr(articles_repository, "delete_article", fake.delete_article)

    monkeypatch.setattr(posts_repository, "list_posts", fake.list_posts)
    monkeypatch.setattr(posts_repository, "get_post", fake.get_post)
    monkeypatch.setattr(posts_repository, "create_post", fake.create_post)
    monkeypatch.setattr(posts_repository, "update_post", fake.update_post)
    monkeypatch.setattr(posts_repository, "delete_post", fake.delete_post)

    return fake


@pytest.fixture()
def app(store):
    return create_app(TEST_SETTINGS)


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client against the app; lifespan (the DB pool) is not started."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def signup(client):
    """Register + log in a user; returns (user_id, auth headers)."""

    async def _signup(username: str, email: str, password: str = PASSWORD) -> tuple[int, dict]:
        r = await client.post(
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        r = await client.post("/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        data = r.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['token']}"}

    return _signup
