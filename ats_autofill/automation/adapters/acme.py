"""Acme Corp ATS adapter.

Form characteristics:
- Four-step wizard; the current step carries the ``active`` class
- School is a client-side typeahead
- Visa sponsorship radios only exist once work authorization is "yes"
- Confirmation id (``ACM-...``) renders on a separate success page
"""

from playwright.async_api import Locator, Page

from ats_autofill.automation.adapters.base import ATSAdapter
from ats_autofill.automation.adapters.registry import AdapterRegistry
from ats_autofill.automation.models import ApplicantProfile, ReferralSource
from ats_autofill.automation.retry import RetryPolicy


@AdapterRegistry.register
class AcmeAdapter(ATSAdapter):
    """Adapter for the Acme multi-step application wizard."""

    platform_id = "acme"
    company_name = "Acme Corp"
    url_patterns = (r"/acme\.html",)

    async def detect_structure(self, page: Page) -> bool:
        logo = page.locator(".ats-header .logo")
        if await logo.count() == 0:
            return False
        return "Acme" in await logo.first.inner_text()

    async def submit(self, page: Page, profile: ApplicantProfile) -> str:
        await self.wait_for_section(page, "form#application-form", timeout_ms=15000)

        # Step 1: Personal Info
        await self._wait_for_step(page, 1)
        await self._fill_personal(page, profile)
        await self.human.hover_then_click(self._continue_button(page, 1))
        await self.human.reading_pause()

        # Step 2: Experience & Education
        await self._wait_for_step(page, 2)
        await self._fill_experience(page, profile)
        await self.human.hover_then_click(self._continue_button(page, 2))
        await self.human.reading_pause()

        # Step 3: Additional Questions
        await self._wait_for_step(page, 3)
        await self._fill_additional(page, profile)
        await self.human.hover_then_click(self._continue_button(page, 3))
        await self.human.reading_pause()

        # Step 4: Review & Submit
        await self._wait_for_step(page, 4)
        self.events.info(self.platform_id, "review", "accepting terms")
        await self.human.ensure_checked(page.locator("#terms-agree"))
        await self.human.hover_then_click(page.locator("#submit-btn"))

        return await self.wait_for_confirmation(page, "#success-page", "#confirmation-id")

    def _continue_button(self, page: Page, step: int) -> Locator:
        return page.locator(f'section.form-step[data-step="{step}"] button.btn.btn-primary')

    async def _wait_for_step(self, page: Page, step: int) -> None:
        await self.wait_for_section(
            page, f'section.form-step[data-step="{step}"]', active_class="active"
        )

    async def _fill_personal(self, page: Page, profile: ApplicantProfile) -> None:
        self.events.info(self.platform_id, "personal", "filling contact fields")
        await self.human.type_text(page.locator("#first-name"), profile.first_name)
        await self.human.type_text(page.locator("#last-name"), profile.last_name)
        await self.human.type_text(page.locator("#email"), profile.email)
        await self.human.type_text(page.locator("#phone"), profile.phone)
        await self.human.type_text(page.locator("#location"), profile.location)

        if profile.linkedin:
            await self.human.type_text(page.locator("#linkedin"), profile.linkedin)
        if profile.portfolio:
            await self.human.type_text(page.locator("#portfolio"), profile.portfolio)

    async def _fill_experience(self, page: Page, profile: ApplicantProfile) -> None:
        self.events.info(self.platform_id, "experience", "uploading resume")
        await self.human.upload(page.locator("#resume"), self.resume_path)

        # Acme option values match the profile enums directly
        await self.human.select_option(
            page.locator("#experience-level"), profile.experience_level.value
        )
        await self.human.select_option(page.locator("#education"), profile.education.value)

        await self.select_typeahead(
            page,
            input_selector="#school",
            list_selector="#school-dropdown",
            option_selector="li",
            value=profile.school,
            policy=RetryPolicy(
                max_attempts=3,
                platform=self.platform_id,
                step="experience",
                action="select school (typeahead)",
            ),
        )

        for skill in profile.skills:
            checkbox = page.locator(f'input[type="checkbox"][name="skills"][value="{skill}"]')
            if await checkbox.count():
                await self.human.ensure_checked(checkbox)

    async def _fill_additional(self, page: Page, profile: ApplicantProfile) -> None:
        work_auth = "yes" if profile.work_authorized else "no"
        self.events.info(self.platform_id, "additional", "work authorization", value=work_auth)
        await self.human.hover_then_click(
            page.locator(f'input[type="radio"][name="workAuth"][value="{work_auth}"]')
        )

        # Sponsorship question is only rendered for authorized applicants
        if profile.requires_visa is not None:
            visa = page.locator(
                'input[type="radio"][name="visaSponsorship"]'
                f'[value="{"yes" if profile.requires_visa else "no"}"]'
            )
            if await self.is_present(visa):
                await self.human.hover_then_click(visa)
            else:
                self.events.info(self.platform_id, "additional", "visa question absent; skipped")

        await self.human.fill_value(page.locator("#start-date"), profile.earliest_start_date)

        if profile.salary_expectation:
            await self.human.type_text(
                page.locator("#salary-expectation"), profile.salary_expectation
            )

        await self.human.select_option(page.locator("#referral"), profile.referral_source.value)
        if profile.referral_source == ReferralSource.OTHER:
            other = page.locator("#referral-other")
            if await self.is_present(other):
                await self.human.type_text(other, profile.referral_other or "Other")

        await self.human.type_text(page.locator("#cover-letter"), self.render_cover_letter(profile))
