"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from validation import validators
from validation.dependencies import validated
from validation.pipeline import Pipeline, body

from . import schemas, service
from .dependencies import Authenticated, get_current_identity, get_token_service
from .security import PasswordHasher, TokenService

router = APIRouter(prefix="/auth")


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=schemas.RegisterResponse)
async def register(
    payload: dict = Depends(validated(Pipeline(body(validators.registration_shape)))),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> schemas.RegisterResponse:
    return await service.register(payload, hasher=hasher)


@router.post("/login", response_model=schemas.LoginResponse)
async def login(
    payload: dict = Depends(validated(Pipeline(body(validators.login_shape)))),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> schemas.LoginResponse:
    return await service.login(payload, hasher=hasher, tokens=tokens)


@router.get("/me", response_model=schemas.UserResponse)
async def me(identity: Authenticated = Depends(get_current_identity)) -> schemas.UserResponse:
    return await service.me(identity.identity_id)
