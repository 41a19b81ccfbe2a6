"""Base ATS adapter interface."""

import logging
import re
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ats_autofill.automation.choices import choose_suggestion, typeahead_seed
from ats_autofill.automation.events import EventLogger
from ats_autofill.automation.human import Human
from ats_autofill.automation.models import (
    ApplicantProfile,
    ApplicationResult,
    ConfirmationError,
    FailureReason,
    SectionTimeoutError,
)
from ats_autofill.automation.retry import RetryPolicy, retry
from ats_autofill.automation.template import render_template
from ats_autofill.config import Settings, get_settings

logger = logging.getLogger(__name__)

_CLASS_PRESENT_JS = """
    ([selector, cssClass]) => {
        const el = document.querySelector(selector);
        return !!el && el.classList.contains(cssClass);
    }
"""

_TEXT_READY_JS = """
    ([selector, placeholder]) => {
        const el = document.querySelector(selector);
        const text = el && el.textContent ? el.textContent.trim() : "";
        return text.length > 0 && text !== placeholder;
    }
"""


class ATSAdapter(ABC):
    """Base strategy for one ATS platform.

    Subclasses implement platform-specific logic for:
    - Recognising the platform's page structure
    - Walking the form section by section and submitting it

    Adapters are constructed once and reused for every submission; anything
    that varies per call lives in local variables of ``submit``.

    Usage:
        adapter = AcmeAdapter(human, events, settings)
        if await adapter.can_handle(page):
            result = await adapter.apply(page, profile)
    """

    platform_id: ClassVar[str]
    company_name: ClassVar[str]
    url_patterns: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        human: Human | None = None,
        events: EventLogger | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.human = human or Human(self.settings.pacing())
        self.events = events or EventLogger()

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    async def can_handle(self, page: Page) -> bool:
        """Check whether ``page`` belongs to this platform.

        URL patterns are checked first; the structural check covers pages
        served from unexpected URLs.
        """
        url = page.url
        for pattern in self.url_patterns:
            if re.search(pattern, url, re.IGNORECASE):
                return True
        return await self.detect_structure(page)

    @abstractmethod
    async def detect_structure(self, page: Page) -> bool:
        """Read-only DOM check for platform-unique markers."""
        ...

    @abstractmethod
    async def submit(self, page: Page, profile: ApplicantProfile) -> str:
        """Fill and submit the form.

        Returns:
            The confirmation identifier shown by the platform

        Raises:
            Exception: any failure; converted to a result by ``apply``
        """
        ...

    async def apply(self, page: Page, profile: ApplicantProfile) -> ApplicationResult:
        """Run the full submission flow. Never raises."""
        start = time.monotonic()
        self.events.info(self.platform_id, "start", "begin apply", url=page.url)

        try:
            confirmation_id = await self.submit(page, profile)
        except Exception as e:
            error = str(e).strip() or type(e).__name__
            self.events.error(self.platform_id, "error", "apply failed", error=error)
            return ApplicationResult.failed(
                error=error,
                reason=FailureReason.SUBMISSION,
                duration_ms=self._elapsed_ms(start),
                platform=self.platform_id,
                screenshot_path=await self.screenshot(page, "failure"),
            )

        self.events.info(
            self.platform_id, "confirm", "got confirmation", confirmation_id=confirmation_id
        )
        return ApplicationResult.succeeded(
            confirmation_id=confirmation_id,
            duration_ms=self._elapsed_ms(start),
            platform=self.platform_id,
            screenshot_path=await self.screenshot(page, "success"),
        )

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)

    @property
    def resume_path(self) -> str:
        """Absolute path of the resume file to upload."""
        return str(Path(self.settings.resume_path).resolve())

    def render_cover_letter(self, profile: ApplicantProfile) -> str:
        """Cover letter with this platform's company filled in."""
        return render_template(
            profile.cover_letter,
            {
                "company": self.company_name,
                "first_name": profile.first_name,
                "last_name": profile.last_name,
                "full_name": profile.full_name,
            },
        )

    async def wait_for_section(
        self,
        page: Page,
        selector: str,
        active_class: str | None = None,
        timeout_ms: int | None = None,
    ) -> None:
        """Wait until a form section is visible (and carries ``active_class``).

        Raises:
            SectionTimeoutError: if the section never becomes interactive
        """
        timeout = timeout_ms or self.human.timeout
        try:
            await page.locator(selector).first.wait_for(state="visible", timeout=timeout)
            if active_class:
                await page.wait_for_function(
                    _CLASS_PRESENT_JS, arg=[selector, active_class], timeout=timeout
                )
        except PlaywrightTimeoutError as e:
            raise SectionTimeoutError(f"Section {selector} did not become active") from e

    async def is_present(self, locator: Locator, timeout_ms: int = 2000) -> bool:
        """Wait for a conditional field; False if it does not show up in time."""
        try:
            await locator.first.wait_for(state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        return True

    async def has_class(self, locator: Locator, css_class: str) -> bool:
        """Check a CSS class on the element."""
        return await locator.evaluate("(el, cls) => el.classList.contains(cls)", css_class)

    async def select_typeahead(
        self,
        page: Page,
        *,
        input_selector: str,
        list_selector: str,
        option_selector: str,
        value: str,
        policy: RetryPolicy,
        open_class: str | None = None,
    ) -> str:
        """Type a seed into a typeahead and click the best suggestion.

        Each attempt starts from an empty field so that a retry never
        searches with leftovers of the previous attempt.

        Returns:
            Text of the suggestion that was clicked
        """
        timeout = self.human.timeout

        async def _attempt() -> str:
            field = page.locator(input_selector)
            await field.fill("", timeout=timeout)
            await self.human.pause()
            await self.human.type_text(field, typeahead_seed(value))

            if open_class:
                await page.wait_for_function(
                    _CLASS_PRESENT_JS, arg=[list_selector, open_class], timeout=timeout
                )
            else:
                await page.locator(list_selector).wait_for(state="visible", timeout=timeout)

            options = page.locator(list_selector).locator(option_selector)
            await options.first.wait_for(state="visible", timeout=timeout)
            texts = [t.strip() for t in await options.all_inner_texts()]
            index = choose_suggestion(texts, value)
            self.events.info(
                policy.platform, policy.step, "typeahead suggestion chosen",
                requested=value, chosen=texts[index], offered=len(texts),
            )
            await self.human.hover_then_click(options.nth(index))
            return texts[index]

        return await retry(_attempt, policy, events=self.events)

    async def wait_for_confirmation(
        self,
        page: Page,
        surface_selector: str,
        ref_selector: str,
        placeholder: str | None = None,
        policy: RetryPolicy | None = None,
    ) -> str:
        """Wait until the confirmation surface shows a real reference id.

        The surface may render before its content is filled in, so the
        whole check is retried with backoff.
        """
        policy = policy or RetryPolicy(
            max_attempts=4,
            base_delay_ms=400,
            max_delay_ms=2500,
            jitter_ms=200,
            platform=self.platform_id,
            step="confirm",
            action="wait for confirmation",
        )
        attempt_timeout = 5000

        async def _attempt() -> str:
            await page.locator(surface_selector).wait_for(state="visible", timeout=attempt_timeout)
            ref = page.locator(ref_selector)
            await ref.wait_for(state="visible", timeout=attempt_timeout)
            await page.wait_for_function(
                _TEXT_READY_JS, arg=[ref_selector, placeholder or ""], timeout=attempt_timeout
            )
            text = ((await ref.text_content()) or "").strip()
            if not text or text == placeholder:
                raise ConfirmationError(f"Confirmation reference not populated: {text!r}")
            return text

        return await retry(_attempt, policy, events=self.events)

    async def screenshot(self, page: Page, label: str) -> str | None:
        """Save a full-page screenshot if a screenshot directory is configured."""
        if not self.settings.screenshot_dir:
            return None

        directory = Path(self.settings.screenshot_dir)
        path = directory / f"{self.platform_id}-{int(time.time() * 1000)}-{label}.png"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(path), full_page=True)
        except Exception as e:
            logger.warning(f"Screenshot failed for {self.platform_id}: {e}")
            return None
        return str(path)
