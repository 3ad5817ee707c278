"""Routes for critical CSS extraction."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import ValidationError

from criticalcss.api.dependencies import get_auth_dependency, get_extractor
from criticalcss.core.config import settings
from criticalcss.core.logging import bind_request_context
from criticalcss.models.critical_css import CriticalCSSRequest
from criticalcss.services.critical_css import CriticalCSSExtractor, ExtractionError
from criticalcss.services.fingerprint import build_cache_key

CACHE_STATUS_HEADER = "X-CriticalCSS-Cache"
INVALID_URL_DETAIL = "Missing or invalid url"

router = APIRouter(prefix="/critical-css", tags=["critical-css"], dependencies=[Depends(get_auth_dependency)])


def _respond(payload: CriticalCSSRequest, extractor: CriticalCSSExtractor) -> Response:
    bind_request_context(url=str(payload.url), scope=payload.scope.value, cache_key=build_cache_key(payload))

    try:
        result = extractor.extract(payload)
    except ExtractionError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error: {exc}") from exc

    headers = {CACHE_STATUS_HEADER: result.cache_status.value}
    if result.is_empty:
        headers["Cache-Control"] = "no-store"
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)

    headers["Cache-Control"] = f"public, max-age={settings.response_max_age_seconds}"
    return Response(content=result.critical_css, media_type="text/css", headers=headers)


@router.get(
    "",
    summary="Extract critical CSS for a page",
    response_class=Response,
    responses={200: {"content": {"text/css": {}}}, 204: {"description": "No critical CSS found"}},
)
def get_critical_css(request: Request, extractor: CriticalCSSExtractor = Depends(get_extractor)) -> Response:
    """Query-string variant: url, w, h, ua, wait, settle, csswait, scope, base."""

    try:
        payload = CriticalCSSRequest.model_validate(dict(request.query_params))
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_URL_DETAIL) from exc

    return _respond(payload, extractor)


@router.post(
    "",
    summary="Extract critical CSS for a page (JSON body)",
    response_class=Response,
    responses={200: {"content": {"text/css": {}}}, 204: {"description": "No critical CSS found"}},
)
def post_critical_css(
    payload: CriticalCSSRequest,
    extractor: CriticalCSSExtractor = Depends(get_extractor),
) -> Response:
    """Same extraction as the GET route with parameters in a JSON body."""

    return _respond(payload, extractor)
