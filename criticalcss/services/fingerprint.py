"""Cache keys derived from the extraction-relevant request parameters."""

from __future__ import annotations

import hashlib
from urllib.parse import urldefrag, urlsplit, urlunsplit

from criticalcss.models.critical_css import CriticalCSSRequest

FIELD_SEPARATOR = "\x1e"
SELECTOR_SEPARATOR = "\x1f"


def normalize_url(url: str) -> str:
    """Lower-case scheme and host and drop the fragment."""

    without_fragment, _ = urldefrag(str(url).strip())
    parts = urlsplit(without_fragment)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, ""))


def canonicalize(request: CriticalCSSRequest) -> str:
    """Serialize the request into the string that gets hashed."""

    fields = (
        normalize_url(str(request.url)),
        str(request.width),
        str(request.height),
        request.user_agent or "",
        str(request.settle_ms),
        str(request.css_wait_ms),
        SELECTOR_SEPARATOR.join(request.wait_selectors),
        request.scope.value,
        "1" if request.include_base else "0",
    )
    return FIELD_SEPARATOR.join(fields)


def build_cache_key(request: CriticalCSSRequest) -> str:
    """Return the SHA-256 hex digest of the canonical request."""

    return hashlib.sha256(canonicalize(request).encode("utf-8")).hexdigest()
