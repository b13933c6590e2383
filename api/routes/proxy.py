"""
Pass-through proxy endpoints for the USA Spending award search API.

Routes:
    POST /api/search  → /api/v2/search/spending_by_award/
    POST /api/count   → /api/v2/search/spending_by_award_count/

The JSON request body is forwarded verbatim.  A 2xx upstream response is
relayed unchanged; an upstream error keeps the upstream status code (500
when no response arrived) with a ``{detail, originalError}`` body.

Bodies that are not a JSON object, or larger than APP_MAX_BODY_BYTES, are
refused before anything is sent upstream.
"""

import json
import logging
from typing import Any

import requests
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from api.models import ProxyErrorOut
from api.upstream import get_config, get_session
from utils.config import AppConfig
from utils.http import UpstreamError, post_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])

PROXY_ERROR_DETAIL = "Error proxying request to USA Spending API."

_ERROR_RESPONSES = {
    400: {"model": ProxyErrorOut, "description": "Body is not a JSON object"},
    413: {"model": ProxyErrorOut, "description": "Body exceeds APP_MAX_BODY_BYTES"},
    500: {"model": ProxyErrorOut, "description": "Upstream unreachable"},
}


def _error(status_code: int, detail: str, original: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ProxyErrorOut(detail=detail, originalError=original).model_dump(),
    )


async def _read_body(request: Request, max_bytes: int) -> dict | JSONResponse:
    """Return the decoded JSON object body, or an error response to send."""
    raw = await request.body()
    if len(raw) > max_bytes:
        return _error(413, f"Request body exceeds {max_bytes} bytes.")
    try:
        body = json.loads(raw or b"null")
    except ValueError:
        return _error(400, "Request body must be valid JSON.")
    if not isinstance(body, dict):
        return _error(400, "Request body must be a JSON object.")
    return body


async def _forward(request: Request, url: str, label: str,
                   config: AppConfig, session: requests.Session) -> JSONResponse:
    body = await _read_body(request, config.max_body_bytes)
    if isinstance(body, JSONResponse):
        return body

    try:
        # requests is blocking; keep it off the event loop
        data = await run_in_threadpool(
            post_json, url, body, session=session, timeout=config.upstream_timeout,
        )
    except UpstreamError as e:
        logger.error(
            "Error proxying %s request: %s",
            label, e.body if e.body is not None else e,
        )
        return _error(e.status_code or 500, PROXY_ERROR_DETAIL, e.body)

    return JSONResponse(content=data)


@router.post(
    "/search",
    summary="Proxy spending_by_award",
    description="Forward the body to the upstream award search endpoint.",
    responses=_ERROR_RESPONSES,
)
async def proxy_search(
    request: Request,
    config: AppConfig = Depends(get_config),
    session: requests.Session = Depends(get_session),
) -> JSONResponse:
    """Relay an award search request."""
    return await _forward(request, config.search_url, "search", config, session)


@router.post(
    "/count",
    summary="Proxy spending_by_award_count",
    description="Forward the body to the upstream award count endpoint.",
    responses=_ERROR_RESPONSES,
)
async def proxy_count(
    request: Request,
    config: AppConfig = Depends(get_config),
    session: requests.Session = Depends(get_session),
) -> JSONResponse:
    """Relay an award count request."""
    return await _forward(request, config.count_url, "count", config, session)
