"""Playwright browser session scoped to a single submission."""

import logging
from types import TracebackType
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from pydantic import BaseModel, Field

from ats_autofill.config import Settings

logger = logging.getLogger(__name__)


class SessionConfig(BaseModel):
    """Options for launching an isolated browser session."""

    headless: bool = True
    slow_mo: int = Field(default=0, ge=0, le=1000, description="Slow motion delay in ms")
    viewport_width: int = Field(default=1280, ge=320, le=3840)
    viewport_height: int = Field(default=720, ge=240, le=2160)
    user_agent: str | None = None
    timeout: int = Field(default=30000, ge=1000, le=120000, description="Default timeout in ms")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionConfig":
        """Build session options from application settings."""
        return cls(
            headless=settings.playwright_headless,
            slow_mo=settings.playwright_slow_mo,
            viewport_width=settings.viewport_width,
            viewport_height=settings.viewport_height,
            timeout=settings.navigation_timeout_ms,
        )


class PlaywrightSession:
    """Own one Chromium browser, context and page for a single submission.

    Use as an async context manager; everything started on entry is closed on
    exit, whatever happened inside the block.

    Usage:
        async with PlaywrightSession(SessionConfig()) as page:
            await page.goto(url)
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        """Initialize session state."""
        self.config = config or SessionConfig()
        self._playwright: Any = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    async def start(self) -> Page:
        """Launch the browser and open a fresh page."""
        logger.info(f"Starting Playwright session (headless={self.config.headless})")

        self._playwright = await async_playwright().start()

        # Launch browser
        self._browser = await self._playwright.chromium.launch(
            headless=self.config.headless,
            slow_mo=self.config.slow_mo,
        )

        # Isolated context per submission
        self._context = await self._browser.new_context(
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            },
            user_agent=self.config.user_agent,
        )
        self._context.set_default_timeout(self.config.timeout)

        self._page = await self._context.new_page()
        logger.info("Playwright session started")
        return self._page

    async def close(self) -> None:
        """Close page, context, browser and Playwright, in that order.

        A failure closing one resource is logged and does not prevent the
        remaining ones from being closed.
        """
        logger.info("Closing Playwright session")

        for name, closer in (
            ("page", self._page.close if self._page else None),
            ("context", self._context.close if self._context else None),
            ("browser", self._browser.close if self._browser else None),
            ("playwright", self._playwright.stop if self._playwright else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning(f"Failed to close {name}: {e}")

        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
        logger.info("Playwright session closed")

    async def __aenter__(self) -> Page:
        try:
            return await self.start()
        except BaseException:
            await self.close()
            raise

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
