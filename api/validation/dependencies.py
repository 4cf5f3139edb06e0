"""
FastAPI glue for the validation pipeline.

`validated(pipeline)` builds one dependency per route. Declare it before the
auth dependency so a malformed request is rejected before the token is even
looked at.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request

from core.errors import ValidationError

from .pipeline import Pipeline, RequestData

logger = logging.getLogger(__name__)


async def _request_data(request: Request, *, read_body: bool) -> RequestData:
    path_params = dict(request.path_params)
    if not read_body:
        return RequestData(path_params=path_params)

    raw = await request.body()
    if not raw.strip():
        return RequestData(path_params=path_params, body=None)
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        return RequestData(path_params=path_params, body_error=str(exc))
    return RequestData(path_params=path_params, body=payload)


def validated(pipeline: Pipeline) -> Callable[[Request], Awaitable[dict[str, Any]]]:
    async def dependency(request: Request) -> dict[str, Any]:
        data = await _request_data(request, read_body=pipeline.reads_body)
        result = pipeline.run(data)
        if not result.ok:
            logger.info(
                "validation_failed method=%s path=%s code=%s",
                request.method,
                request.url.path,
                result.code,
            )
            raise ValidationError(result)
        return data.body if isinstance(data.body, dict) else {}

    return dependency
