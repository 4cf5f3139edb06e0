"""
Article endpoints. Reads are public; writes need a bearer token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from auth.dependencies import Authenticated, get_current_identity
from validation import validators
from validation.dependencies import validated
from validation.pipeline import Pipeline, body, path_param

from . import service

router = APIRouter(prefix="/articles")

valid_id = validated(Pipeline(path_param("article_id", validators.id_shape)))


@router.get("")
async def list_articles() -> list[dict]:
    return await service.list_articles()


@router.get("/{article_id}", dependencies=[Depends(valid_id)])
async def get_article(article_id: str) -> dict:
    return await service.get_article(int(article_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_article(
    payload: dict = Depends(validated(Pipeline(body(validators.article_shape)))),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.create_article(payload, identity_id=identity.identity_id)


@router.put("/{article_id}")
async def replace_article(
    article_id: str,
    payload: dict = Depends(
        validated(
            Pipeline(
                path_param("article_id", validators.id_shape),
                body(validators.article_shape),
            )
        )
    ),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.update_article(int(article_id), payload, identity_id=identity.identity_id)


@router.patch("/{article_id}")
async def patch_article(
    article_id: str,
    payload: dict = Depends(
        validated(
            Pipeline(
                path_param("article_id", validators.id_shape),
                body(validators.partial_article_shape),
            )
        )
    ),
    identity: Authenticated = Depends(get_current_identity),
) -> dict:
    return await service.update_article(int(article_id), payload, identity_id=identity.identity_id)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: str,
    _: dict = Depends(valid_id),
    identity: Authenticated = Depends(get_current_identity),
) -> Response:
    await service.delete_article(int(article_id), identity_id=identity.identity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
