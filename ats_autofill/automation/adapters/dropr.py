"""Dropr ATS adapter.

Based on the Dropr flow: contact -> work -> uploads -> final. Only the
current section is shown; the next one is revealed after its "next" button
is clicked. Experience is a custom listbox rather than a native select, and
the confirmation page can appear before the reference id is filled in.
"""

from playwright.async_api import Page

from ats_autofill.automation.adapters.base import ATSAdapter
from ats_autofill.automation.adapters.registry import AdapterRegistry
from ats_autofill.automation.models import ApplicantProfile, ExperienceLevel

NOTE_MAX_LENGTH = 1100
DEFAULT_ROLE_TITLE = "Software Engineering Intern"
DEFAULT_COMPANY = "Sample Company"

EXPERIENCE_OPTIONS: dict[ExperienceLevel, str] = {
    ExperienceLevel.ENTRY: "intern",
    ExperienceLevel.JUNIOR: "junior",
    ExperienceLevel.MID: "mid",
    ExperienceLevel.SENIOR: "senior",
    ExperienceLevel.STAFF: "staff",
}


@AdapterRegistry.register
class DroprAdapter(ATSAdapter):
    """Adapter for the Dropr sectioned form."""

    platform_id = "dropr"
    company_name = "Dropr"
    url_patterns = (r"/dropr\.html",)

    async def detect_structure(self, page: Page) -> bool:
        return await page.locator("#dropr-form").count() > 0

    async def submit(self, page: Page, profile: ApplicantProfile) -> str:
        await self.wait_for_section(page, "#d-step-contact")
        await self._fill_contact(page, profile)
        self.events.info(self.platform_id, "contact", "click next-to-work")
        await self.human.hover_then_click(page.locator("#next-to-work"))

        await self.wait_for_section(page, "#d-step-work")
        await self._fill_work(page, profile)
        self.events.info(self.platform_id, "work", "click next-to-uploads")
        await self.human.hover_then_click(page.locator("#next-to-uploads"))

        await self.wait_for_section(page, "#d-step-uploads")
        await self._fill_uploads(page)
        self.events.info(self.platform_id, "uploads", "click next-to-final")
        await self.human.hover_then_click(page.locator("#next-to-final"))

        await self.wait_for_section(page, "#d-step-final")
        self.events.info(self.platform_id, "final", "checking consent")
        await self.human.ensure_checked(page.locator("#d-consent"))
        await self.human.reading_pause()

        self.events.info(self.platform_id, "final", "click submit")
        await self.human.hover_then_click(page.locator("#dropr-submit"))

        return await self.wait_for_confirmation(page, "#dropr-success", "#dropr-ref")

    async def _fill_contact(self, page: Page, profile: ApplicantProfile) -> None:
        await self.human.reading_pause()
        for selector, field, value in (
            ("#d-first", "firstName", profile.first_name),
            ("#d-last", "lastName", profile.last_name),
            ("#d-email", "email", profile.email),
            ("#d-phone", "phone", profile.phone),
            ("#d-location", "location", profile.location),
        ):
            self.events.info(self.platform_id, "contact", "type field", field=field)
            await self.human.type_text(page.locator(selector), value)

    async def _fill_work(self, page: Page, profile: ApplicantProfile) -> None:
        self.events.info(self.platform_id, "work", "open experience listbox")
        await self.human.hover_then_click(page.locator("#d-exp-btn"))
        await self.wait_for_section(page, "#d-exp-menu")

        value = EXPERIENCE_OPTIONS[profile.experience_level]
        self.events.info(self.platform_id, "work", "select experience option", value=value)
        await self.human.hover_then_click(page.locator(f'#d-exp-menu .option[data-value="{value}"]'))

        # First experience card is present by default
        await self.human.type_text(
            page.locator("#exp-container .d-exp-title").first, DEFAULT_ROLE_TITLE
        )
        await self.human.type_text(
            page.locator("#exp-container .d-exp-company").first, DEFAULT_COMPANY
        )

        await self.human.fill_value(page.locator("#d-start-date"), profile.earliest_start_date)

        if profile.salary_expectation:
            await self.human.type_text(page.locator("#d-salary"), profile.salary_expectation)

        note = self.render_cover_letter(profile)[:NOTE_MAX_LENGTH]
        await self.human.reading_pause()
        self.events.info(self.platform_id, "work", "type field", field="note")
        await self.human.type_text(page.locator("#d-note"), note)

    async def _fill_uploads(self, page: Page) -> None:
        self.events.info(self.platform_id, "uploads", "attach files")
        await self.human.upload(page.locator("#d-resume"), self.resume_path)
        await self.human.upload(page.locator("#d-cover"), self.resume_path)
