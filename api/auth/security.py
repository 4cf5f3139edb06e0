"""
Auth security helpers: password digests and identity tokens.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import bcrypt
import jwt
from fastapi.concurrency import run_in_threadpool

from core.errors import AuthError, AuthFailure

REQUIRED_CLAIMS = ["sub", "iat", "exp"]


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str, *, rounds: int = 10) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise ValueError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


class PasswordHasher:
    """
    bcrypt digests computed in a worker thread.

    bcrypt is deliberately slow; running it off the event loop keeps other
    requests moving while one login is being checked.
    """

    def __init__(self, *, rounds: int = 10) -> None:
        self.rounds = rounds

    async def hash(self, plain_password: str) -> str:
        return await run_in_threadpool(hash_password, plain_password, rounds=self.rounds)

    async def verify(self, plain_password: str, password_hash: str | None) -> bool:
        return await run_in_threadpool(verify_password, plain_password, password_hash)


class TokenService:
    """
    Issues and verifies signed, time-limited identity tokens (JWT).

    Tokens are stateless: nothing is stored, and expiry is the only way a
    token stops working. A token is still accepted at exactly its `exp`
    second and rejected once the clock moves past it.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        ttl_seconds: int = 24 * 60 * 60,
        clock: Callable[[], int] = now_epoch_s,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret is empty.")
        if ttl_seconds <= 0:
            raise ValueError("Token TTL must be positive.")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, subject_id: int) -> str:
        issued_at = self._clock()
        payload = {
            "sub": str(subject_id),
            "iat": issued_at,
            "exp": issued_at + self._ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> int:
        raw = (token or "").strip()
        if not raw:
            raise AuthError(AuthFailure.MALFORMED)

        # Expiry is checked against our own clock below.
        try:
            payload = jwt.decode(
                raw,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False, "require": REQUIRED_CLAIMS},
            )
        except jwt.InvalidSignatureError as exc:
            raise AuthError(AuthFailure.BAD_SIGNATURE) from exc
        except jwt.InvalidTokenError as exc:
            raise AuthError(AuthFailure.MALFORMED) from exc

        subject = str(payload.get("sub") or "").strip()
        expires_at = payload.get("exp")
        if not subject.isdigit() or not isinstance(expires_at, int):
            raise AuthError(AuthFailure.MALFORMED)

        if self._clock() > expires_at:
            raise AuthError(AuthFailure.EXPIRED)

        return int(subject)
