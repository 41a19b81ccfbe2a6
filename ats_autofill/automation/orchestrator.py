"""Submission orchestrator.

Drives one submission end to end:
1. Acquire an isolated browsing context
2. Navigate to the target URL
3. Ask the registry which adapter handles the page
4. Delegate the form flow to that adapter
5. Stamp the result with the total wall-clock duration
6. Release the context on every exit path

Nothing raised below this boundary reaches the caller; every call returns an
``ApplicationResult``.
"""

import logging
import time
from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager, AsyncExitStack

from playwright.async_api import Page

from ats_autofill.automation.adapters.registry import AdapterRegistry
from ats_autofill.automation.events import EventLogger
from ats_autofill.automation.models import (
    ApplicantProfile,
    ApplicationResult,
    FailureReason,
)
from ats_autofill.browser.session import PlaywrightSession, SessionConfig
from ats_autofill.config import Settings, get_settings

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[Page]]

PLATFORM = "core"


class ApplicationOrchestrator:
    """Run submissions against whichever registered ATS claims the page.

    Each call owns its own browser session, so separate calls never share
    page state.

    Usage:
        registry = AdapterRegistry.from_registered(human, events, settings)
        orchestrator = ApplicationOrchestrator(registry, settings=settings)
        result = await orchestrator.apply_to_target(url, profile)
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        settings: Settings | None = None,
        session_factory: SessionFactory | None = None,
        events: EventLogger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            registry: Adapters to try, in detection order
            settings: Application settings (navigation timeout, browser options)
            session_factory: Returns an async context manager yielding a page;
                defaults to a fresh Playwright session per submission
            events: Sink for step events
            clock: Monotonic clock in seconds
        """
        self.registry = registry
        self.settings = settings or get_settings()
        self.events = events or EventLogger()
        self._clock = clock
        self._session_factory = session_factory or self._playwright_session

    def _playwright_session(self) -> AbstractAsyncContextManager[Page]:
        return PlaywrightSession(SessionConfig.from_settings(self.settings))

    def _elapsed_ms(self, start: float) -> int:
        return max(0, int((self._clock() - start) * 1000))

    async def apply_to_target(self, url: str, profile: ApplicantProfile) -> ApplicationResult:
        """Submit ``profile`` to the form at ``url``. Never raises."""
        start = self._clock()
        self.events.info(PLATFORM, "orchestrator", "starting submission", url=url)

        stack = AsyncExitStack()
        try:
            page = await stack.enter_async_context(self._session_factory())
        except Exception as e:
            error = str(e).strip() or type(e).__name__
            self.events.error(PLATFORM, "orchestrator", "browser session failed", error=error)
            return ApplicationResult.failed(
                error=f"Browser session failed: {error}",
                reason=FailureReason.BROWSER,
                duration_ms=self._elapsed_ms(start),
            )

        try:
            result = await self._run(page, url, profile, start)
        except Exception as e:
            logger.exception(f"Submission to {url} raised")
            result = ApplicationResult.failed(
                error=str(e).strip() or type(e).__name__,
                reason=FailureReason.SUBMISSION,
                duration_ms=self._elapsed_ms(start),
            )
        finally:
            release_error = await self._release(stack)

        if release_error is not None and result.success:
            result = ApplicationResult.failed(
                error=f"Browser session release failed: {release_error}",
                reason=FailureReason.BROWSER,
                platform=result.platform,
                duration_ms=result.duration_ms,
            )

        if result.success:
            self.events.info(
                PLATFORM, "orchestrator", "submission succeeded",
                adapter=result.platform, confirmation_id=result.confirmation_id,
                duration_ms=result.duration_ms,
            )
        else:
            self.events.warning(
                PLATFORM, "orchestrator", "submission failed",
                adapter=result.platform, reason=result.failure_reason.value,
                error=result.error, duration_ms=result.duration_ms,
            )
        return result

    async def _release(self, stack: AsyncExitStack) -> str | None:
        """Close the browsing context; returns the error text if closing failed."""
        try:
            await stack.aclose()
        except Exception as e:
            error = str(e).strip() or type(e).__name__
            self.events.warning(PLATFORM, "orchestrator", "browser session release failed", error=error)
            return error
        return None

    async def _run(
        self,
        page: Page,
        url: str,
        profile: ApplicantProfile,
        start: float,
    ) -> ApplicationResult:
        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.settings.navigation_timeout_ms,
            )
        except Exception as e:
            return ApplicationResult.failed(
                error=f"Navigation to {url} failed: {e}",
                reason=FailureReason.NAVIGATION,
                duration_ms=self._elapsed_ms(start),
            )

        if response is not None and not response.ok:
            return ApplicationResult.failed(
                error=f"Navigation to {url} failed: HTTP {response.status}",
                reason=FailureReason.NAVIGATION,
                duration_ms=self._elapsed_ms(start),
            )

        adapter = await self.registry.detect(page)
        if adapter is None:
            return ApplicationResult.failed(
                error=f"No applicable ATS adapter for {url}",
                reason=FailureReason.NO_ADAPTER,
                duration_ms=0,
            )

        self.events.info(PLATFORM, "orchestrator", "adapter selected", adapter=adapter.platform_id)
        try:
            result = await adapter.apply(page, profile)
        except Exception as e:
            logger.exception(f"Adapter {adapter.platform_id} raised out of apply()")
            result = ApplicationResult.failed(
                error=str(e).strip() or type(e).__name__,
                reason=FailureReason.SUBMISSION,
                platform=adapter.platform_id,
            )

        return result.with_duration(self._elapsed_ms(start))

    async def apply_to_targets(
        self,
        urls: Iterable[str],
        profile: ApplicantProfile,
    ) -> list[ApplicationResult]:
        """Submit to each URL in turn, one browser session per URL."""
        results = []
        for url in urls:
            results.append(await self.apply_to_target(url, profile))
        return results
