"""End-to-end submissions against the bundled mock ATS pages.

Pages are served from ``tests/fixtures/pages`` through Playwright request
routing, so no HTTP server is needed. Tests are skipped when Chromium is not
installed (``playwright install chromium``).
"""

import asyncio
import re
from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from playwright.async_api import Route, async_playwright

from ats_autofill.automation.adapters import AdapterRegistry
from ats_autofill.automation.choices import parse_amount, snap_to_step
from ats_autofill.automation.human import Human, Pacing
from ats_autofill.automation.models import FailureReason
from ats_autofill.automation.orchestrator import ApplicationOrchestrator
from ats_autofill.browser import PlaywrightSession, SessionConfig
from ats_autofill.config import PacingProfile, Settings

pytestmark = pytest.mark.integration

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"
PAGES = FIXTURES / "pages"
BASE_URL = "http://ats.test"


def _chromium_available() -> bool:
    async def launch_once() -> None:
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            await browser.close()

    try:
        asyncio.run(launch_once())
    except Exception:
        return False
    return True


@pytest.fixture(scope="module")
def chromium():
    if not _chromium_available():
        pytest.skip("Chromium is not installed for Playwright")


async def _serve_fixture(route: Route) -> None:
    name = route.request.url.split("?")[0].rsplit("/", 1)[-1]
    path = PAGES / name
    if path.is_file():
        await route.fulfill(path=str(path), content_type="text/html")
    else:
        await route.fulfill(status=404, body="not found")


class MockAtsSessions:
    """Session factory serving fixture pages and capturing slider state."""

    def __init__(self, config: SessionConfig):
        self.config = config
        self.slider_values: list[int] = []
        self.closed = 0

    def __call__(self):
        return self._session()

    @asynccontextmanager
    async def _session(self):
        async with PlaywrightSession(self.config) as page:
            await page.route(f"{BASE_URL}/**", _serve_fixture)
            try:
                yield page
                if "globex" in page.url:
                    value = await page.locator("#g-salary").input_value()
                    self.slider_values.append(int(float(value)))
            finally:
                self.closed += 1


@pytest.fixture
def settings():
    return Settings(
        pacing_profile=PacingProfile.FAST,
        playwright_headless=True,
        resume_path=str(FIXTURES / "sample-resume.pdf"),
        screenshot_dir=None,
    )


@pytest.fixture
def sessions(settings):
    return MockAtsSessions(SessionConfig.from_settings(settings))


@pytest.fixture
def orchestrator(settings, sessions):
    registry = AdapterRegistry.from_registered(human=Human(Pacing.fast()), settings=settings)
    return ApplicationOrchestrator(registry, settings=settings, session_factory=sessions)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "page_name,platform,prefix",
    [
        ("acme.html", "acme", "ACM-"),
        ("globex.html", "globex", "GX-"),
        ("ycombinator.html", "tsent", "TS-"),
        ("dropr.html", "dropr", "DR-"),
    ],
)
async def test_submits_mock_form(chromium, orchestrator, sessions, profile, page_name, platform, prefix):
    """Each mock ATS accepts the sample profile and shows a real reference."""
    result = await orchestrator.apply_to_target(f"{BASE_URL}/{page_name}", profile)

    assert result.success is True, result.error
    assert result.platform == platform
    assert result.confirmation_id.startswith(prefix)
    assert re.fullmatch(rf"{re.escape(prefix)}\w+", result.confirmation_id)
    assert result.confirmation_id != "TS-000000"
    assert result.duration_ms > 0
    assert sessions.closed == 1


@pytest.mark.asyncio
async def test_globex_salary_snapped_to_slider_step(chromium, orchestrator, sessions, profile):
    """Salary lands on the nearest slider step inside the slider bounds."""
    result = await orchestrator.apply_to_target(f"{BASE_URL}/globex.html", profile)

    assert result.success is True, result.error
    expected = int(snap_to_step(parse_amount(profile.salary_expectation), 30000, 200000, 5000))
    assert sessions.slider_values == [expected]


@pytest.mark.asyncio
async def test_missing_page_reports_navigation_failure(chromium, orchestrator, sessions, profile):
    """A 404 response is a navigation failure, not an adapter failure."""
    result = await orchestrator.apply_to_target(f"{BASE_URL}/missing.html", profile)

    assert result.success is False
    assert result.failure_reason == FailureReason.NAVIGATION
    assert sessions.closed == 1


@pytest.mark.asyncio
async def test_unrecognised_page_reports_no_adapter(chromium, orchestrator, sessions, profile):
    """A page none of the adapters recognise fails cleanly."""
    result = await orchestrator.apply_to_target(f"{BASE_URL}/careers.html", profile)

    assert result.success is False
    assert result.failure_reason == FailureReason.NO_ADAPTER
    assert result.duration_ms == 0
    assert sessions.closed == 1
