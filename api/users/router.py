"""
User profile endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from auth.dependencies import Authenticated, get_current_identity
from validation import validators
from validation.dependencies import validated
from validation.pipeline import Pipeline, body, path_param

from . import service

router = APIRouter(prefix="/users")

valid_id = validated(Pipeline(path_param("user_id", validators.id_shape)))


@router.get("")
async def list_users() -> list[dict]:
    return await service.list_users()


@router.get("/{user_id}", dependencies=[Depends(valid_id)])
async def get_user(user_id: str) -> dict:
    return await service.get_user(int(user_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: dict = Depends(validated(Pipeline(body(validators.required_update_shape)))),
) -> dict:
    return await service.create_user(payload)


@router.put("/{user_id}")
async def replace_user(
    user_id: str,
    payload: dict = Depends(
        validated(
            Pipeline(
                path_param("user_id", validators.id_shape),
                body(validators.required_update_shape),
            )
        )
    ),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.replace_user(int(user_id), payload, identity_id=identity.identity_id)


@router.patch("/{user_id}")
async def patch_user(
    user_id: str,
    payload: dict = Depends(
        validated(
            Pipeline(
                path_param("user_id", validators.id_shape),
                body(validators.partial_update_shape),
            )
        )
    ),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.patch_user(int(user_id), payload, identity_id=identity.identity_id)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    _: dict = Depends(valid_id),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.delete_user(int(user_id), identity_id=identity.identity_id)


@router.get("/{user_id}/posts", dependencies=[Depends(valid_id)])
async def list_user_posts(user_id: str) -> list[dict]:
    return await service.list_posts(int(user_id))


@router.get("/{user_id}/posts-with-user", dependencies=[Depends(valid_id)])
async def list_user_posts_with_user(user_id: str) -> list[dict]:
    return await service.list_posts(int(user_id), with_user=True)
