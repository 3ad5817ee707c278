"""Shared test fixtures: a scripted renderer and a controllable clock."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import pytest

from criticalcss.models.coverage import UsageRecord
from criticalcss.models.critical_css import CriticalCSSRequest
from criticalcss.services.critical_css import CriticalCSSExtractor
from criticalcss.services.result_cache import ResultCache


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSession:
    def __init__(self, renderer: "FakeRenderer") -> None:
        self._renderer = renderer

    def start_tracking(self) -> None:
        self._renderer.calls.append("start_tracking")

    def stop_tracking(self) -> list[UsageRecord]:
        self._renderer.calls.append("stop_tracking")
        if not self._renderer.windows:
            return []
        return list(self._renderer.windows.pop(0))

    def load(self) -> None:
        self._renderer.calls.append("load")
        if self._renderer.error is not None:
            raise self._renderer.error

    def isolate_fold(self) -> None:
        self._renderer.calls.append("isolate_fold")

    def restyle(self) -> None:
        self._renderer.calls.append("restyle")

    def get_sheet_text(self, sheet_id: str) -> str:
        self._renderer.fetched.append(sheet_id)
        return self._renderer.sheet_texts.get(sheet_id, "")


class FakeRenderer:
    """Replays one list of usage records per tracking window."""

    def __init__(
        self,
        windows: list[list[UsageRecord]] | None = None,
        sheet_texts: dict[str, str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.script = [list(window) for window in windows or []]
        self.windows: list[list[UsageRecord]] = []
        self.sheet_texts = dict(sheet_texts or {})
        self.error = error
        self.opened = 0
        self.calls: list[str] = []
        self.fetched: list[str] = []

    @contextmanager
    def open(self, request: CriticalCSSRequest) -> Iterator[FakeSession]:
        self.opened += 1
        self.windows = [list(window) for window in self.script]
        yield FakeSession(self)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> ResultCache:
    return ResultCache(max_items=10, ttl_seconds=60 * 30, clock=clock)


@pytest.fixture()
def renderer_factory():
    """Build a FakeRenderer: ``renderer_factory(windows, sheet_texts, error=None)``."""
    return FakeRenderer


@pytest.fixture()
def make_extractor(cache: ResultCache):
    def _make(renderer: FakeRenderer) -> CriticalCSSExtractor:
        return CriticalCSSExtractor(renderer=renderer, cache=cache)

    return _make


@pytest.fixture()
def page_request() -> CriticalCSSRequest:
    return CriticalCSSRequest(url="https://example.com/landing")
