"""Unit tests for the Playwright render session, driven through mocks."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from criticalcss.models.coverage import UsageRecord
from criticalcss.models.critical_css import CriticalCSSRequest
from criticalcss.services.renderer import PlaywrightRenderSession


def _session(**request_params) -> tuple[PlaywrightRenderSession, MagicMock, MagicMock]:
    page = MagicMock()
    cdp = MagicMock()
    request = CriticalCSSRequest(url="https://example.com", **request_params)
    return PlaywrightRenderSession(page, cdp, request, selector_timeout_ms=12_000), page, cdp


class TestStopTracking:
    def test_parses_rule_usage_and_skips_malformed_entries(self) -> None:
        session, _, cdp = _session()
        cdp.send.return_value = {
            "ruleUsage": [
                {"styleSheetId": "7.1", "startOffset": 0, "endOffset": 12.0, "used": True},
                {"styleSheetId": "7.1", "startOffset": 12, "endOffset": 20, "used": False},
                {"startOffset": 1, "endOffset": 2, "used": True},
                {"styleSheetId": "7.2", "startOffset": "x", "endOffset": 2, "used": True},
            ]
        }

        records = session.stop_tracking()

        cdp.send.assert_called_once_with("CSS.stopRuleUsageTracking")
        assert records == [UsageRecord("7.1", 0, 12, True), UsageRecord("7.1", 12, 20, False)]

    def test_missing_payload(self) -> None:
        session, _, cdp = _session()
        cdp.send.return_value = None
        assert session.stop_tracking() == []


class TestGetSheetText:
    def test_returns_text(self) -> None:
        session, _, cdp = _session()
        cdp.send.return_value = {"text": "a{b:c}"}
        assert session.get_sheet_text("1") == "a{b:c}"
        cdp.send.assert_called_once_with("CSS.getStyleSheetText", {"styleSheetId": "1"})

    def test_failure_yields_empty_text(self) -> None:
        session, _, cdp = _session()
        cdp.send.side_effect = PlaywrightError("No style sheet with given id found")
        assert session.get_sheet_text("1") == ""


class TestLoad:
    def test_waits_are_best_effort(self) -> None:
        session, page, _ = _session(wait=["header", "#hero"], settle="250")
        page.wait_for_load_state.side_effect = PlaywrightTimeoutError("Timeout 60000ms exceeded.")
        page.wait_for_function.side_effect = PlaywrightTimeoutError("Timeout 15000ms exceeded.")
        page.wait_for_selector.side_effect = PlaywrightError("waiting for selector failed")

        session.load()

        page.goto.assert_called_once_with("https://example.com/", wait_until="domcontentloaded")
        assert page.wait_for_load_state.call_count == 2
        assert [call.args[0] for call in page.wait_for_selector.call_args_list] == ["header", "#hero"]
        page.wait_for_timeout.assert_called_once_with(250)

    def test_zero_settle_skips_the_delay(self) -> None:
        session, page, _ = _session(settle="0")
        session.load()
        page.wait_for_timeout.assert_not_called()

    def test_navigation_failure_propagates(self) -> None:
        session, page, _ = _session()
        page.goto.side_effect = PlaywrightError("net::ERR_CONNECTION_REFUSED")
        with pytest.raises(PlaywrightError):
            session.load()


class TestTracking:
    def test_start_tracking_uses_cdp(self) -> None:
        session, _, cdp = _session()
        session.start_tracking()
        cdp.send.assert_called_once_with("CSS.startRuleUsageTracking")

    def test_isolate_fold_and_restyle_evaluate_scripts(self) -> None:
        session, page, _ = _session()
        page.evaluate.return_value = 3
        session.isolate_fold()
        session.restyle()
        assert page.evaluate.call_count == 3
