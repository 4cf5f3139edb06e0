"""
Post endpoints. Reads are public; writes need a bearer token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from auth.dependencies import Authenticated, get_current_identity
from validation import validators
from validation.dependencies import validated
from validation.pipeline import Pipeline, body, path_param

from . import service

router = APIRouter(prefix="/posts")

valid_id = validated(Pipeline(path_param("post_id", validators.id_shape)))


@router.get("")
async def list_posts() -> list[dict]:
    return await service.list_posts()


@router.get("/{post_id}", dependencies=[Depends(valid_id)])
async def get_post(post_id: str) -> dict:
    return await service.get_post(int(post_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: dict = Depends(validated(Pipeline(body(validators.post_shape)))),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.create_post(payload, identity_id=identity.identity_id)


@router.put("/{post_id}")
async def replace_post(
    post_id: str,
    payload: dict = Depends(
        validated(
            Pipeline(
                path_param("post_id", validators.id_shape),
                body(validators.post_shape),
            )
        )
    ),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.update_post(int(post_id), payload, identity_id=identity.identity_id)


@router.patch("/{post_id}")
async def patch_post(
    post_id: str,
    payload: dict = Depends(
        validated(
            Pipeline(
                path_param("post_id", validators.id_shape),
                body(validators.partial_post_shape),
            )
        )
    ),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.update_post(int(post_id), payload, identity_id=identity.identity_id)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    _: dict = Depends(valid_id),
    identity: Authenticated = Depends(get_current_identity),
) -> Response:
    await service.delete_post(int(post_id), identity_id=identity.identity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
