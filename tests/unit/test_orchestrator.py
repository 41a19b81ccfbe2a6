"""Tests for the submission orchestrator."""

import logging
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from ats_autofill.automation.adapters import AdapterRegistry
from ats_autofill.automation.models import ApplicationResult, FailureReason
from ats_autofill.automation.orchestrator import ApplicationOrchestrator

EVENTS_LOGGER = "ats_autofill.events"


class FakeClock:
    """Monotonic clock advanced manually by the test."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class SessionTracker:
    """Session factory that hands out one page per call and records releases."""

    def __init__(
        self,
        page=None,
        fail_on_enter: Exception | None = None,
        fail_on_exit: Exception | None = None,
    ):
        self.page = page or _page()
        self.fail_on_enter = fail_on_enter
        self.fail_on_exit = fail_on_exit
        self.opened = 0
        self.closed = 0

    def __call__(self):
        return self._session()

    @asynccontextmanager
    async def _session(self):
        if self.fail_on_enter is not None:
            raise self.fail_on_enter
        self.opened += 1
        try:
            yield self.page
        finally:
            self.closed += 1
            if self.fail_on_exit is not None:
                raise self.fail_on_exit


def _page(status_ok: bool = True) -> MagicMock:
    response = MagicMock()
    response.ok = status_ok
    response.status = 200 if status_ok else 404
    page = MagicMock()
    page.url = "http://ats.test/form.html"
    page.goto = AsyncMock(return_value=response)
    return page


def _adapter(platform_id: str = "acme", apply=None) -> MagicMock:
    adapter = MagicMock()
    adapter.platform_id = platform_id
    adapter.apply = apply or AsyncMock(
        return_value=ApplicationResult.succeeded("ACM-1", duration_ms=7, platform=platform_id)
    )
    return adapter


def _registry(adapter) -> MagicMock:
    registry = MagicMock(spec=AdapterRegistry)
    registry.detect = AsyncMock(return_value=adapter)
    return registry


def _orchestrator(registry, sessions, test_settings, clock=None) -> ApplicationOrchestrator:
    return ApplicationOrchestrator(
        registry,
        settings=test_settings,
        session_factory=sessions,
        clock=clock or FakeClock(),
    )


class TestApplyToTarget:
    """Tests for ApplicationOrchestrator.apply_to_target."""

    @pytest.mark.asyncio
    async def test_success_duration_is_total_elapsed(self, test_settings, profile):
        clock = FakeClock()

        async def slow_apply(page, prof):
            clock.now += 2.5
            return ApplicationResult.succeeded("ACM-9", duration_ms=7, platform="acme")

        adapter = _adapter(apply=AsyncMock(side_effect=slow_apply))
        sessions = SessionTracker()
        orchestrator = _orchestrator(_registry(adapter), sessions, test_settings, clock)

        result = await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        assert result.success is True
        assert result.confirmation_id == "ACM-9"
        assert result.duration_ms == 2500
        assert sessions.closed == 1

    @pytest.mark.asyncio
    async def test_navigates_with_configured_timeout(self, test_settings, profile):
        sessions = SessionTracker()
        orchestrator = _orchestrator(_registry(_adapter()), sessions, test_settings)

        await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        sessions.page.goto.assert_awaited_once_with(
            "http://ats.test/acme.html",
            wait_until="domcontentloaded",
            timeout=test_settings.navigation_timeout_ms,
        )

    @pytest.mark.asyncio
    async def test_no_adapter(self, test_settings, profile):
        sessions = SessionTracker()
        orchestrator = _orchestrator(_registry(None), sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/lever.html", profile)

        assert result.success is False
        assert result.failure_reason == FailureReason.NO_ADAPTER
        assert result.error == "No applicable ATS adapter for http://ats.test/lever.html"
        assert result.duration_ms == 0
        assert sessions.closed == 1

    @pytest.mark.asyncio
    async def test_adapter_failure_is_returned(self, test_settings, profile):
        failure = ApplicationResult.failed(
            "Section #step-3 did not become active", FailureReason.SUBMISSION, platform="acme"
        )
        adapter = _adapter(apply=AsyncMock(return_value=failure))
        sessions = SessionTracker()
        orchestrator = _orchestrator(_registry(adapter), sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        assert result.success is False
        assert result.error == "Section #step-3 did not become active"
        assert result.platform == "acme"
        assert sessions.closed == 1

    @pytest.mark.asyncio
    async def test_adapter_raising_out_of_apply(self, test_settings, profile):
        adapter = _adapter(apply=AsyncMock(side_effect=RuntimeError("page crashed")))
        sessions = SessionTracker()
        orchestrator = _orchestrator(_registry(adapter), sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        assert result.success is False
        assert result.failure_reason == FailureReason.SUBMISSION
        assert result.error == "page crashed"
        assert sessions.closed == 1

    @pytest.mark.asyncio
    async def test_navigation_error(self, test_settings, profile):
        page = _page()
        page.goto.side_effect = RuntimeError("net::ERR_CONNECTION_REFUSED")
        adapter = _adapter()
        registry = _registry(adapter)
        sessions = SessionTracker(page)
        orchestrator = _orchestrator(registry, sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        assert result.failure_reason == FailureReason.NAVIGATION
        assert "ERR_CONNECTION_REFUSED" in result.error
        registry.detect.assert_not_awaited()
        adapter.apply.assert_not_awaited()
        assert sessions.closed == 1

    @pytest.mark.asyncio
    async def test_http_error_status(self, test_settings, profile):
        sessions = SessionTracker(_page(status_ok=False))
        orchestrator = _orchestrator(_registry(_adapter()), sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/missing.html", profile)

        assert result.failure_reason == FailureReason.NAVIGATION
        assert "HTTP 404" in result.error

    @pytest.mark.asyncio
    async def test_session_acquisition_failure(self, test_settings, profile):
        sessions = SessionTracker(fail_on_enter=RuntimeError("Executable doesn't exist"))
        orchestrator = _orchestrator(_registry(_adapter()), sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        assert result.success is False
        assert result.failure_reason == FailureReason.BROWSER
        assert result.error.startswith("Browser session failed")

    @pytest.mark.asyncio
    async def test_detection_error_propagating_is_contained(self, test_settings, profile):
        registry = MagicMock(spec=AdapterRegistry)
        registry.detect = AsyncMock(side_effect=RuntimeError("detached"))
        sessions = SessionTracker()
        orchestrator = _orchestrator(registry, sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        assert result.success is False
        assert result.failure_reason == FailureReason.SUBMISSION
        assert result.error == "detached"
        assert sessions.closed == 1

    @pytest.mark.asyncio
    async def test_release_failure_after_success_is_browser_failure(self, test_settings, profile):
        sessions = SessionTracker(fail_on_exit=RuntimeError("browser already closed"))
        orchestrator = _orchestrator(_registry(_adapter()), sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        assert result.success is False
        assert result.failure_reason == FailureReason.BROWSER
        assert result.error == "Browser session release failed: browser already closed"
        assert result.platform == "acme"
        assert sessions.closed == 1

    @pytest.mark.asyncio
    async def test_release_failure_keeps_earlier_failure_reason(self, test_settings, profile):
        sessions = SessionTracker(
            _page(status_ok=False), fail_on_exit=RuntimeError("browser already closed")
        )
        orchestrator = _orchestrator(_registry(_adapter()), sessions, test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/missing.html", profile)

        assert result.failure_reason == FailureReason.NAVIGATION
        assert sessions.closed == 1

    @pytest.mark.asyncio
    async def test_release_failure_is_logged(self, test_settings, profile, caplog):
        caplog.set_level(logging.INFO, logger=EVENTS_LOGGER)
        sessions = SessionTracker(fail_on_exit=RuntimeError("browser already closed"))
        orchestrator = _orchestrator(_registry(_adapter()), sessions, test_settings)

        await orchestrator.apply_to_target("http://ats.test/acme.html", profile)

        warnings = [
            r for r in caplog.records
            if r.message.startswith("[core] [orchestrator] browser session release failed")
        ]
        assert len(warnings) == 1
        assert warnings[0].levelno == logging.WARNING
        assert warnings[0].meta["error"] == "browser already closed"


class TestOrchestratorEvents:
    """Events emitted around a submission."""

    @pytest.mark.asyncio
    async def test_success_reports_adapter(self, test_settings, profile, caplog):
        caplog.set_level(logging.INFO, logger=EVENTS_LOGGER)
        orchestrator = _orchestrator(_registry(_adapter("globex")), SessionTracker(), test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/globex.html", profile)

        assert result.success is True
        selected = [r for r in caplog.records if "adapter selected" in r.message]
        succeeded = [r for r in caplog.records if "submission succeeded" in r.message]
        assert [r.meta["adapter"] for r in selected] == ["globex"]
        assert succeeded[0].meta["adapter"] == "globex"
        assert succeeded[0].meta["confirmation_id"] == "ACM-1"
        assert all(r.platform == "core" and r.step == "orchestrator" for r in selected + succeeded)

    @pytest.mark.asyncio
    async def test_no_adapter_is_reported_not_raised(self, test_settings, profile, caplog):
        caplog.set_level(logging.INFO, logger=EVENTS_LOGGER)
        orchestrator = _orchestrator(_registry(None), SessionTracker(), test_settings)

        result = await orchestrator.apply_to_target("http://ats.test/lever.html", profile)

        assert result.failure_reason == FailureReason.NO_ADAPTER
        failed = [r for r in caplog.records if "submission failed" in r.message]
        assert len(failed) == 1
        assert failed[0].meta["reason"] == "no_adapter"
        assert "adapter" not in failed[0].meta


class TestApplyToTargets:
    """Tests for batch submission."""

    @pytest.mark.asyncio
    async def test_one_session_per_url_in_order(self, test_settings, profile):
        sessions = SessionTracker()
        adapter = _adapter()
        orchestrator = _orchestrator(_registry(adapter), sessions, test_settings)
        urls = ["http://ats.test/a.html", "http://ats.test/b.html", "http://ats.test/c.html"]

        results = await orchestrator.apply_to_targets(urls, profile)

        assert len(results) == 3
        assert sessions.opened == 3
        assert sessions.closed == 3
        visited = [c.args[0] for c in sessions.page.goto.await_args_list]
        assert visited == urls

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_batch(self, test_settings, profile):
        adapter = _adapter()
        adapter.apply = AsyncMock(
            side_effect=[
                RuntimeError("first fails"),
                ApplicationResult.succeeded("ACM-2", platform="acme"),
            ]
        )
        sessions = SessionTracker()
        orchestrator = _orchestrator(_registry(adapter), sessions, test_settings)

        results = await orchestrator.apply_to_targets(["http://a", "http://b"], profile)

        assert [r.success for r in results] == [False, True]
