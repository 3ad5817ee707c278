"""Shared API dependencies."""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader, APIKeyQuery

from criticalcss.core.config import settings
from criticalcss.services.critical_css import CriticalCSSExtractor, critical_css_extractor

api_token_header = APIKeyHeader(name=settings.auth_token_header, auto_error=False)
api_token_query = APIKeyQuery(name="token", auto_error=False)


def verify_api_key(
    header_token: str | None = Security(api_token_header),
    query_token: str | None = Security(api_token_query),
) -> str:
    """Validate the static API token if one is configured.

    The token may come from the ``token`` query parameter or the auth header
    (optionally as ``Bearer <token>``).
    """

    expected = settings.api_token
    if not expected:
        return ""

    for token in (query_token, header_token):
        if token in {expected, f"Bearer {expected}"}:
            return token

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_auth_dependency(token: str = Depends(verify_api_key)) -> str:
    """Expose dependency alias for routers."""

    return token


def get_extractor() -> CriticalCSSExtractor:
    """Return the process-wide extractor; overridden in tests."""

    return critical_css_extractor
