"""
API error taxonomy and the FastAPI handlers that render it.

Every error the API returns on purpose is an `ApiError`; its subclasses fix
the status code. Anything else escaping a handler is a 500 whose detail is
only shown in development.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import asyncpg
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

if TYPE_CHECKING:
    from validation.pipeline import ValidationResult

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, error: str, *, details: list[str] | None = None) -> None:
        super().__init__(error)
        self.error = error
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            payload["details"] = list(self.details)
        return payload


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.summary, details=list(result.messages))
        self.result = result


class AuthFailure(str, enum.Enum):
    MISSING = "missing"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


class AuthError(ApiError):
    """
    Authentication failed. The reason is kept for logs; callers only ever
    see "Unauthorized".
    """

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, reason: AuthFailure) -> None:
        super().__init__("Unauthorized")
        self.reason = reason


class InvalidCredentialsError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class OwnershipError(NotFoundError):
    """
    The resource exists but belongs to someone else. Rendered exactly like
    `NotFoundError` so other users' resources don't leak.
    """


class ConflictError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnexpectedStoreError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


DUPLICATE_IDENTITY_MESSAGE = "User with this email or username already exists"


@contextmanager
def store_errors(message: str) -> Iterator[None]:
    """
    Convert persistence failures inside the block into API errors.

    `ApiError`s pass through untouched, unique violations become a
    `ConflictError` and anything else is logged and surfaced as
    `UnexpectedStoreError(message)`.
    """
    try:
        yield
    except ApiError:
        raise
    except asyncpg.UniqueViolationError as exc:
        logger.info("unique_violation constraint=%s", getattr(exc, "constraint_name", None))
        raise ConflictError(DUPLICATE_IDENTITY_MESSAGE) from exc
    except Exception as exc:
        logger.exception("store_failure message=%r", message)
        raise UnexpectedStoreError(message) from exc


def install_exception_handlers(app: FastAPI, *, expose_errors: bool) -> None:
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        if isinstance(exc, AuthError):
            headers = {"WWW-Authenticate": "Bearer"}
        else:
            headers = None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [str(err.get("msg", "")) for err in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": details},
        )

    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown paths and unsupported methods on known paths read the same.
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={
                    "error": "Route not found",
                    "message": f"Cannot {request.method} {request.url.path}",
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal Server Error",
                "message": str(exc) if expose_errors else "Something went wrong",
            },
        )

    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
