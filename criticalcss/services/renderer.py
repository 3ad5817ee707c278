"""Playwright rendering collaborator exposing CSS rule-usage coverage over CDP."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, ContextManager, Iterator, List, Optional, Protocol

from playwright.sync_api import CDPSession, Error as PlaywrightError, Page, sync_playwright

from criticalcss.core.config import settings
from criticalcss.core.logging import get_logger
from criticalcss.models.coverage import UsageRecord
from criticalcss.models.critical_css import CriticalCSSRequest

logger = get_logger(__name__)

# Every <link rel=stylesheet> has a sheet and none is still parked on media=print
# (the "load async then flip media" trick).
STYLESHEETS_APPLIED_JS = """
() => {
  const links = Array.from(document.querySelectorAll('link[rel="stylesheet"]'));
  const allHaveSheet = links.every(link => !!link.sheet);
  const anyPrint = links.some(link => (link.media || "").toLowerCase() === "print");
  return allHaveSheet && !anyPrint;
}
"""

FONTS_READY_JS = """
async () => {
  try {
    if (document.fonts && document.fonts.ready) {
      await document.fonts.ready;
    }
  } catch (e) {}
}
"""

TWO_FRAMES_JS = "() => new Promise(resolve => requestAnimationFrame(() => requestAnimationFrame(resolve)))"

HIDE_BELOW_FOLD_JS = """
() => {
  window.scrollTo(0, 0);
  const fold = window.innerHeight;
  const skip = new Set(["SCRIPT", "STYLE", "LINK", "META", "NOSCRIPT", "TEMPLATE"]);
  const elements = document.body ? Array.from(document.body.querySelectorAll("*")) : [];
  const below = new Set(
    elements.filter(el => !skip.has(el.tagName) && el.getBoundingClientRect().top >= fold)
  );
  let hidden = 0;
  for (const el of below) {
    if (el.parentElement && below.has(el.parentElement)) continue;
    el.style.setProperty("display", "none", "important");
    hidden += 1;
  }
  return hidden;
}
"""

# Changing a custom property on the root invalidates every element's style.
RESTYLE_JS = """
() => {
  document.documentElement.style.setProperty("--critical-css-restyle", String(Date.now()));
  return document.documentElement.offsetHeight;
}
"""


class RenderSession(Protocol):
    """One loaded page with rule-usage tracking."""

    def start_tracking(self) -> None: ...

    def stop_tracking(self) -> List[UsageRecord]: ...

    def load(self) -> None: ...

    def isolate_fold(self) -> None: ...

    def restyle(self) -> None: ...

    def get_sheet_text(self, sheet_id: str) -> str: ...


class Renderer(Protocol):
    def open(self, request: CriticalCSSRequest) -> ContextManager[RenderSession]: ...


class PlaywrightRenderSession:
    """Drives a Chromium page and its CDP session for a single request."""

    def __init__(
        self,
        page: Page,
        cdp: CDPSession,
        request: CriticalCSSRequest,
        selector_timeout_ms: int,
    ) -> None:
        self._page = page
        self._cdp = cdp
        self._request = request
        self._selector_timeout_ms = selector_timeout_ms

    def start_tracking(self) -> None:
        self._cdp.send("CSS.startRuleUsageTracking")

    def stop_tracking(self) -> List[UsageRecord]:
        payload = self._cdp.send("CSS.stopRuleUsageTracking") or {}

        records: List[UsageRecord] = []
        for entry in payload.get("ruleUsage") or []:
            try:
                records.append(
                    UsageRecord(
                        sheet_id=str(entry["styleSheetId"]),
                        start_offset=int(entry["startOffset"]),
                        end_offset=int(entry["endOffset"]),
                        used=bool(entry.get("used")),
                    )
                )
            except (KeyError, TypeError, ValueError):
                continue
        return records

    def load(self) -> None:
        """Navigate, then wait for the page to look stable.

        Only the navigation itself is fatal; every later wait is best effort.
        """

        request = self._request
        self._page.goto(str(request.url), wait_until="domcontentloaded")

        self._best_effort("load", lambda: self._page.wait_for_load_state("load"))
        self._best_effort("networkidle", lambda: self._page.wait_for_load_state("networkidle"))
        self._best_effort(
            "stylesheets_applied",
            lambda: self._page.wait_for_function(STYLESHEETS_APPLIED_JS, timeout=request.css_wait_ms),
        )
        for selector in request.wait_selectors:
            self._best_effort(
                "selector",
                lambda: self._page.wait_for_selector(selector, state="attached", timeout=self._selector_timeout_ms),
                selector=selector,
            )
        self._best_effort("fonts", lambda: self._page.evaluate(FONTS_READY_JS))
        self._best_effort("frames", lambda: self._page.evaluate(TWO_FRAMES_JS))

        if request.settle_ms > 0:
            self._page.wait_for_timeout(request.settle_ms)

    def isolate_fold(self) -> None:
        hidden = self._page.evaluate(HIDE_BELOW_FOLD_JS)
        logger.debug("render_fold_isolated", hidden_elements=hidden)

    def restyle(self) -> None:
        self._best_effort("restyle", lambda: self._page.evaluate(RESTYLE_JS))
        self._best_effort("frames", lambda: self._page.evaluate(TWO_FRAMES_JS))

    def get_sheet_text(self, sheet_id: str) -> str:
        try:
            payload = self._cdp.send("CSS.getStyleSheetText", {"styleSheetId": sheet_id}) or {}
        except PlaywrightError as exc:
            logger.debug("render_sheet_text_unavailable", sheet_id=sheet_id, error=str(exc))
            return ""
        return payload.get("text") or ""

    @staticmethod
    def _best_effort(step: str, action: Callable[[], Any], **context: Any) -> None:
        try:
            action()
        except PlaywrightError as exc:
            logger.warning("render_wait_skipped", step=step, error=str(exc), **context)


class PlaywrightRenderer:
    """Launches headless Chromium per request; the browser never outlives the session."""

    def __init__(
        self,
        headless: Optional[bool] = None,
        timeout_seconds: Optional[int] = None,
        selector_timeout_ms: Optional[int] = None,
    ) -> None:
        self.headless = settings.playwright_headless if headless is None else headless
        self.timeout_seconds = timeout_seconds or settings.playwright_timeout_seconds
        self.selector_timeout_ms = selector_timeout_ms or settings.selector_wait_timeout_ms

    @contextmanager
    def open(self, request: CriticalCSSRequest) -> Iterator[PlaywrightRenderSession]:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=self.headless)
            try:
                page = browser.new_page(
                    viewport={"width": request.width, "height": request.height},
                    user_agent=request.user_agent or None,
                )
                page.emulate_media(media="screen")
                page.set_default_timeout(self.timeout_seconds * 1000)

                cdp = page.context.new_cdp_session(page)
                cdp.send("DOM.enable")
                cdp.send("CSS.enable")

                yield PlaywrightRenderSession(page, cdp, request, self.selector_timeout_ms)
            finally:
                browser.close()
