"""
Request-shape validators.

Each one collects every violated field of its own input (one message per
field) and never looks at anything else, so running it twice on the same
input gives the same messages.
"""

from __future__ import annotations

import re
from typing import Any

from email_validator import EmailNotValidError, validate_email

from .pipeline import ValidationResult

ID_PATTERN = re.compile(r"[0-9]+")

USERNAME_MAX = 50
# New accounts need a slightly longer name than profile edits allow.
REGISTRATION_USERNAME_MIN = 3
PROFILE_USERNAME_MIN = 2
PASSWORD_MIN = 6
# bcrypt only accepts up to 72 bytes of password input.
PASSWORD_MAX_BYTES = 72
# Ids land in BIGINT columns.
ID_MAX = 2**63 - 1

INVALID_BODY = "Validation failed"


def _fields(payload: Any) -> dict[str, Any] | None:
    return payload if isinstance(payload, dict) else None


def _not_an_object() -> ValidationResult:
    return ValidationResult.failure("invalid_body", INVALID_BODY, ["Request body must be a JSON object"])


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _username_errors(value: Any, *, min_length: int) -> list[str]:
    if _is_blank(value):
        return ["Username is required"]
    if not isinstance(value, str):
        return ["Username must be a string"]
    length = len(value.strip())
    if length < min_length:
        return [f"Username must be at least {min_length} characters"]
    if length > USERNAME_MAX:
        return [f"Username must not exceed {USERNAME_MAX} characters"]
    return []


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _email_errors(value: Any) -> list[str]:
    if _is_blank(value):
        return ["Email is required"]
    if not isinstance(value, str) or not is_valid_email(value.strip()):
        return ["Email must be a valid email"]
    return []


def _password_errors(value: Any) -> list[str]:
    if value is None or value == "":
        return ["Password is required"]
    if not isinstance(value, str):
        return ["Password must be a string"]
    if len(value) < PASSWORD_MIN:
        return [f"Password must be at least {PASSWORD_MIN} characters"]
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return [f"Password must not exceed {PASSWORD_MAX_BYTES} bytes"]
    return []


def _text_errors(label: str, value: Any) -> list[str]:
    if _is_blank(value):
        return [f"{label} is required"]
    if not isinstance(value, str):
        return [f"{label} must be a string"]
    return []


def _optional_text_errors(label: str, value: Any) -> list[str]:
    if value is None or isinstance(value, str):
        return []
    return [f"{label} must be a string"]


def _result(code: str, messages: list[str]) -> ValidationResult:
    if messages:
        return ValidationResult.failure(code, INVALID_BODY, messages)
    return ValidationResult.success()


def id_shape(value: Any) -> ValidationResult:
    if isinstance(value, str) and ID_PATTERN.fullmatch(value) and int(value) <= ID_MAX:
        return ValidationResult.success()
    return ValidationResult.failure("invalid_id", "Invalid ID", ["ID must be a positive number"])


def registration_shape(payload: Any) -> ValidationResult:
    fields = _fields(payload)
    if fields is None:
        return _not_an_object()
    messages = [
        *_username_errors(fields.get("username"), min_length=REGISTRATION_USERNAME_MIN),
        *_email_errors(fields.get("email")),
        *_password_errors(fields.get("password")),
    ]
    return _result("invalid_registration", messages)


def login_shape(payload: Any) -> ValidationResult:
    fields = _fields(payload)
    if fields is None:
        return _not_an_object()
    messages: list[str] = []
    if _is_blank(fields.get("email")) or not isinstance(fields.get("email"), str):
        messages.append("Email is required")
    password = fields.get("password")
    if not isinstance(password, str) or password == "":
        messages.append("Password is required")
    return _result("invalid_login", messages)


def required_update_shape(payload: Any) -> ValidationResult:
    fields = _fields(payload)
    if fields is None:
        return _not_an_object()
    messages = [
        *_username_errors(fields.get("username"), min_length=PROFILE_USERNAME_MIN),
        *_email_errors(fields.get("email")),
    ]
    return _result("invalid_user", messages)


def partial_update_shape(payload: Any) -> ValidationResult:
    fields = _fields(payload)
    if fields is None:
        return _not_an_object()
    username = fields.get("username")
    email = fields.get("email")
    if username is None and email is None:
        return ValidationResult.failure(
            "no_fields_to_update",
            "No fields to update",
            ["At least one of username or email is required"],
        )
    messages: list[str] = []
    if username is not None:
        messages.extend(_username_errors(username, min_length=PROFILE_USERNAME_MIN))
    if email is not None:
        messages.extend(_email_errors(email))
    return _result("invalid_user", messages)


def _content_shape(payload: Any, *, text_field: str, label: str) -> ValidationResult:
    fields = _fields(payload)
    if fields is None:
        return _not_an_object()
    messages = [
        *_text_errors("Title", fields.get("title")),
        *_text_errors(label, fields.get(text_field)),
        *_optional_text_errors("Category", fields.get("category")),
    ]
    return _result("invalid_content", messages)


def _partial_content_shape(payload: Any, *, text_field: str, label: str, editable: tuple[str, ...]) -> ValidationResult:
    fields = _fields(payload)
    if fields is None:
        return _not_an_object()
    if all(fields.get(name) is None for name in editable):
        return ValidationResult.failure(
            "no_fields_to_update",
            "No fields to update",
            [f"At least one of {', '.join(editable)} is required"],
        )
    messages: list[str] = []
    if fields.get("title") is not None:
        messages.extend(_text_errors("Title", fields.get("title")))
    if fields.get(text_field) is not None:
        messages.extend(_text_errors(label, fields.get(text_field)))
    messages.extend(_optional_text_errors("Category", fields.get("category")))
    return _result("invalid_content", messages)


def article_shape(payload: Any) -> ValidationResult:
    return _content_shape(payload, text_field="body", label="Body")


def partial_article_shape(payload: Any) -> ValidationResult:
    return _partial_content_shape(
        payload,
        text_field="body",
        label="Body",
        editable=("title", "body", "category"),
    )


def post_shape(payload: Any) -> ValidationResult:
    return _content_shape(payload, text_field="content", label="Content")


def partial_post_shape(payload: Any) -> ValidationResult:
    return _partial_content_shape(
        payload,
        text_field="content",
        label="Content",
        editable=("title", "content"),
    )
