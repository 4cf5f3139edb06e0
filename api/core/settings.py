"""
Process-wide settings, read from the environment once at startup.

The resulting `Settings` object is immutable and passed explicitly to
`main.create_app`, which builds the token service from it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_JWT_SECRET = "dev-change-this-secret"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = _env_str(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    port: int = 3000
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 24
    bcrypt_rounds: int = 10
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = ("*",)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> Settings:
        settings = cls(
            port=_env_int("PORT", 3000),
            jwt_secret=_env_str("JWT_SECRET", DEFAULT_JWT_SECRET),
            jwt_algorithm=_env_str("JWT_ALG", "HS256"),
            token_ttl_hours=_env_int("TOKEN_TTL_HOURS", 24),
            bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 10),
            environment=_env_str("ENVIRONMENT", "development").lower(),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            cors_origins=_env_list("CORS_ORIGINS", "*"),
        )
        if settings.is_production and settings.jwt_secret == DEFAULT_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be set in production.")
        return settings
