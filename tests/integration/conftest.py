"""Integration fixtures: the FastAPI app wired to a fake renderer."""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from criticalcss.api.dependencies import get_extractor
from criticalcss.core.config import settings
from criticalcss.main import app
from criticalcss.models.coverage import UsageRecord


@pytest.fixture()
def renderer(renderer_factory):
    return renderer_factory(
        windows=[[UsageRecord("A", 0, 13, True), UsageRecord("A", 13, 24, False)]],
        sheet_texts={"A": "h1{color:red}p{margin:0}"},
    )


@pytest.fixture()
def client(renderer, make_extractor, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    monkeypatch.setattr(settings, "api_token", "")
    extractor = make_extractor(renderer)
    app.dependency_overrides[get_extractor] = lambda: extractor
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
