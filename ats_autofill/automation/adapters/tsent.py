"""Tsenta modal-message adapter.

The "application" is a single message typed into a modal dialog. The
reference node is rendered up front with a ``TS-000000`` placeholder and only
updated once the server answers.
"""

from playwright.async_api import Page

from ats_autofill.automation.adapters.base import ATSAdapter
from ats_autofill.automation.adapters.registry import AdapterRegistry
from ats_autofill.automation.models import ApplicantProfile

PLACEHOLDER_REF = "TS-000000"
MIN_MESSAGE_LENGTH = 50
MESSAGE_FILLER = (
    " I'm excited to connect and share more details about my background and interest."
)


@AdapterRegistry.register
class TsentAdapter(ATSAdapter):
    """Adapter for the Tsenta contact modal."""

    platform_id = "tsent"
    company_name = "Tsenta"
    url_patterns = (r"/ycombinator\.html",)

    async def detect_structure(self, page: Page) -> bool:
        return await page.locator("#openModal").count() > 0

    def build_message(self, profile: ApplicantProfile) -> str:
        """Cover letter text padded to the modal's minimum length."""
        message = self.render_cover_letter(profile).strip()
        if len(message) < MIN_MESSAGE_LENGTH:
            message += MESSAGE_FILLER
        return message

    async def submit(self, page: Page, profile: ApplicantProfile) -> str:
        self.events.info(self.platform_id, "modal", "open modal")
        await self.human.hover_then_click(page.locator("#openModal"))
        await self.wait_for_section(page, "#modal")

        message = self.build_message(profile)
        await self.human.reading_pause()
        self.events.info(self.platform_id, "message", "type field", field="message", length=len(message))
        await self.human.type_text(page.locator("#message"), message)
        await self.human.reading_pause()

        self.events.info(self.platform_id, "submit", "click send")
        await self.human.hover_then_click(page.locator("#sendBtn"))

        return await self.wait_for_confirmation(
            page, "#confirmView", "#tsent-ref", placeholder=PLACEHOLDER_REF
        )
