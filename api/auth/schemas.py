"""
Auth API schemas (response models).

Request bodies are checked by the validation pipeline, not by Pydantic, so
that shape errors come back in the API's own `{error, details}` format.
"""

from __future__ import annotations

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    username: str
    email: str


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    user: UserResponse


class LoginResponse(BaseModel):
    message: str = "Login successful"
    user: UserResponse
    token: str
