"""Critical CSS extraction pipeline."""

from __future__ import annotations

from typing import List, Optional

from criticalcss.core.logging import get_logger
from criticalcss.models.coverage import CoverageSnapshot
from criticalcss.models.critical_css import (
    CacheStatus,
    CriticalCSSRequest,
    CriticalCSSResult,
    ScopeMode,
)
from criticalcss.services.coverage import assemble_coverage, group_used_ranges
from criticalcss.services.fingerprint import build_cache_key
from criticalcss.services.global_base import collect_global_base_blocks, select_base_sheets
from criticalcss.services.minifier import minify_css
from criticalcss.services.renderer import PlaywrightRenderer, Renderer
from criticalcss.services.result_cache import ResultCache, result_cache

logger = get_logger(__name__)


class ExtractionError(RuntimeError):
    """Raised when no coverage could be obtained or the pipeline broke."""


def collect_coverage(renderer: Renderer, request: CriticalCSSRequest) -> CoverageSnapshot:
    """Record rule usage and fetch the text of every sheet with used rules.

    Tracking starts before navigation. In ``fold`` scope the full-page window
    is thrown away and a second window is recorded once everything below the
    fold is hidden.
    """

    with renderer.open(request) as session:
        session.start_tracking()
        session.load()
        usage = session.stop_tracking()

        if request.scope is ScopeMode.fold:
            session.isolate_fold()
            session.start_tracking()
            session.restyle()
            usage = session.stop_tracking()

        sheet_ids = list(dict.fromkeys(record.sheet_id for record in usage if record.used))
        sheet_texts = {sheet_id: session.get_sheet_text(sheet_id) for sheet_id in sheet_ids}

    return CoverageSnapshot(usage=usage, sheet_texts=sheet_texts)


def build_critical_css(snapshot: CoverageSnapshot, include_base: bool = False) -> str:
    """Merge, assemble, optionally prepend the global base, and minify."""

    spans_by_sheet = group_used_ranges(snapshot.usage)
    css = assemble_coverage(spans_by_sheet, snapshot.sheet_texts)

    if include_base:
        touched = [sheet_id for sheet_id, spans in spans_by_sheet.items() if spans]
        blocks: List[str] = []
        for sheet_id in select_base_sheets(touched, snapshot.sheet_texts):
            blocks.extend(collect_global_base_blocks(snapshot.sheet_texts[sheet_id]))
        base = "\n".join(dict.fromkeys(blocks))
        if base:
            css = f"{base}\n{css}"

    return minify_css(css)


class CriticalCSSExtractor:
    """Serves critical CSS from the result cache or extracts it with the renderer."""

    def __init__(self, renderer: Optional[Renderer] = None, cache: Optional[ResultCache] = None) -> None:
        self._renderer = renderer or PlaywrightRenderer()
        self._cache = cache if cache is not None else result_cache

    def extract(self, request: CriticalCSSRequest) -> CriticalCSSResult:
        """Return cached or freshly extracted CSS; empty results are never cached."""

        cache_key = build_cache_key(request)

        cached = self._cache.get(cache_key)
        if cached:
            logger.info("critical_css_cache_hit", cache_key=cache_key)
            return CriticalCSSResult(critical_css=cached, cache_status=CacheStatus.hit, cache_key=cache_key)

        logger.info("critical_css_extraction_started", cache_key=cache_key, scope=request.scope.value)
        try:
            snapshot = collect_coverage(self._renderer, request)
            critical_css = build_critical_css(snapshot, include_base=request.include_base)
        except Exception as exc:
            logger.exception("critical_css_extraction_failed", cache_key=cache_key, error=str(exc))
            raise ExtractionError(str(exc) or exc.__class__.__name__) from exc

        if not critical_css:
            logger.info("critical_css_empty", cache_key=cache_key, rules=len(snapshot.usage))
            return CriticalCSSResult(critical_css="", cache_status=CacheStatus.miss, cache_key=cache_key)

        self._cache.set(cache_key, critical_css)
        logger.info(
            "critical_css_extraction_completed",
            cache_key=cache_key,
            sheets=len(snapshot.sheet_texts),
            size=len(critical_css),
        )
        return CriticalCSSResult(critical_css=critical_css, cache_status=CacheStatus.miss, cache_key=cache_key)


critical_css_extractor = CriticalCSSExtractor()
