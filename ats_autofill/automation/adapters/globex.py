"""Globex Corporation ATS adapter.

Form characteristics:
- Single page split into accordion sections that start collapsed
- Option values use Globex's own codes (``mid``, ``bs``, ``py``...)
- University search fetches results asynchronously and shuffles them
- Yes/no questions are toggle switches keyed by ``data-value``
- Salary is a range slider with a coarse step
"""

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ats_autofill.automation.adapters.base import ATSAdapter
from ats_autofill.automation.adapters.registry import AdapterRegistry
from ats_autofill.automation.choices import parse_amount, snap_to_step
from ats_autofill.automation.models import (
    ApplicantProfile,
    Education,
    ExperienceLevel,
    FieldMismatchError,
    ReferralSource,
    SectionTimeoutError,
)
from ats_autofill.automation.retry import RetryPolicy

EXPERIENCE_CODES: dict[ExperienceLevel, str] = {
    ExperienceLevel.ENTRY: "intern",
    ExperienceLevel.JUNIOR: "junior",
    ExperienceLevel.MID: "mid",
    ExperienceLevel.SENIOR: "senior",
    ExperienceLevel.STAFF: "staff",
}

DEGREE_CODES: dict[Education, str] = {
    Education.HIGH_SCHOOL: "hs",
    Education.ASSOCIATES: "assoc",
    Education.BACHELORS: "bs",
    Education.MASTERS: "ms",
    Education.PHD: "phd",
}

SKILL_CODES: dict[str, str] = {
    "javascript": "js",
    "typescript": "ts",
    "python": "py",
    "react": "react",
    "nodejs": "node",
    "sql": "sql",
    "git": "git",
    "docker": "docker",
    "aws": "aws",
    "graphql": "graphql",
}

_ALL_BODIES_VISIBLE_JS = """
    () => Array.from(document.querySelectorAll(".section-body"))
        .every((body) => body.offsetParent !== null)
"""

_SET_RANGE_JS = """
    (el, value) => {
        el.value = String(value);
        el.dispatchEvent(new Event("input", { bubbles: true }));
        el.dispatchEvent(new Event("change", { bubbles: true }));
    }
"""


@AdapterRegistry.register
class GlobexAdapter(ATSAdapter):
    """Adapter for the Globex single-page accordion form."""

    platform_id = "globex"
    company_name = "Globex Corporation"
    url_patterns = (r"/globex\.html",)

    async def detect_structure(self, page: Page) -> bool:
        header = page.locator(".globex-header h1")
        if await header.count() == 0:
            return False
        return "Globex" in await header.first.inner_text()

    async def submit(self, page: Page, profile: ApplicantProfile) -> str:
        await self.wait_for_section(page, "form#globex-form", timeout_ms=15000)
        await self._open_all_sections(page)

        await self._fill_contact(page, profile)
        await self.human.reading_pause()

        await self._fill_qualifications(page, profile)
        await self.human.reading_pause()

        await self._fill_additional(page, profile)

        await self.human.reading_pause()
        self.events.info(self.platform_id, "submit", "click submit")
        await self.human.hover_then_click(page.locator("#globex-submit"))

        return await self.wait_for_confirmation(page, "#globex-confirmation", "#globex-ref")

    async def _open_all_sections(self, page: Page) -> None:
        headers = page.locator(".section-header")
        for i in range(await headers.count()):
            header = headers.nth(i)
            if not await self.has_class(header, "open"):
                await self.human.hover_then_click(header)

        try:
            await page.wait_for_function(_ALL_BODIES_VISIBLE_JS, timeout=self.human.timeout)
        except PlaywrightTimeoutError as e:
            raise SectionTimeoutError("Accordion sections did not open") from e

    async def _fill_contact(self, page: Page, profile: ApplicantProfile) -> None:
        self.events.info(self.platform_id, "contact", "filling contact fields")
        await self.human.type_text(page.locator("#g-fname"), profile.first_name)
        await self.human.type_text(page.locator("#g-lname"), profile.last_name)
        await self.human.type_text(page.locator("#g-email"), profile.email)
        await self.human.type_text(page.locator("#g-phone"), profile.phone)
        # Field expects the city only
        await self.human.type_text(page.locator("#g-city"), profile.city)

        if profile.linkedin:
            await self.human.type_text(page.locator("#g-linkedin"), profile.linkedin)
        if profile.portfolio:
            await self.human.type_text(page.locator("#g-website"), profile.portfolio)

    async def _fill_qualifications(self, page: Page, profile: ApplicantProfile) -> None:
        self.events.info(self.platform_id, "qualifications", "uploading resume")
        await self.human.upload(page.locator("#g-resume"), self.resume_path)

        await self.human.select_option(
            page.locator("#g-experience"), EXPERIENCE_CODES[profile.experience_level]
        )
        await self.human.select_option(page.locator("#g-degree"), DEGREE_CODES[profile.education])

        await self.select_typeahead(
            page,
            input_selector="#g-school",
            list_selector="#g-school-results",
            option_selector="li:not(.typeahead-no-results)",
            value=profile.school,
            open_class="open",
            policy=RetryPolicy(
                max_attempts=5,
                base_delay_ms=300,
                max_delay_ms=2000,
                jitter_ms=200,
                platform=self.platform_id,
                step="qualifications",
                action="select university (async typeahead)",
            ),
        )

        await self._select_skill_chips(page, profile.skills)

    async def _select_skill_chips(self, page: Page, skills: tuple[str, ...]) -> None:
        codes = [SKILL_CODES[s] for s in skills if s in SKILL_CODES]
        # At least one chip is required
        for code in codes or ["js"]:
            chip = page.locator(f'#g-skills .chip[data-skill="{code}"]')
            if await chip.count() and not await self.has_class(chip, "selected"):
                await self.human.hover_then_click(chip)

    async def _set_toggle(self, page: Page, selector: str, desired: bool) -> None:
        toggle = page.locator(selector)
        await self.human.scroll_into_view(toggle)
        current = await toggle.get_attribute("data-value") == "true"
        if current != desired:
            await self.human.hover_then_click(toggle)

    async def _set_salary_slider(self, page: Page, salary: str) -> None:
        desired = parse_amount(salary)
        if desired is None:
            self.events.warning(self.platform_id, "additional", "salary not numeric; skipped")
            return

        slider = page.locator("#g-salary")
        await self.human.scroll_into_view(slider)
        minimum = float(await slider.get_attribute("min") or 0)
        maximum = float(await slider.get_attribute("max") or 0)
        step = float(await slider.get_attribute("step") or 1)
        snapped = int(snap_to_step(desired, minimum, maximum, step))

        await slider.evaluate(_SET_RANGE_JS, snapped)
        after = int(float(await slider.input_value()))
        self.events.info(
            self.platform_id, "additional", "salary set",
            desired=desired, snapped=snapped, after=after,
        )
        if after != snapped:
            raise FieldMismatchError(f"Salary slider mismatch: wanted {snapped}, got {after}")
        await self.human.pause()

    async def _fill_additional(self, page: Page, profile: ApplicantProfile) -> None:
        await self._set_toggle(page, "#g-work-auth-toggle", profile.work_authorized)

        # Visa toggle is revealed only after work authorization is switched on
        if profile.work_authorized and profile.requires_visa:
            if await self.is_present(page.locator("#g-visa-block"), timeout_ms=5000):
                await self._set_toggle(page, "#g-visa-toggle", True)

        await self.human.fill_value(page.locator("#g-start-date"), profile.earliest_start_date)

        if profile.salary_expectation:
            await self._set_salary_slider(page, profile.salary_expectation)

        await self.human.select_option(page.locator("#g-source"), profile.referral_source.value)
        if profile.referral_source == ReferralSource.OTHER:
            other = page.locator("#g-source-other")
            if await self.is_present(other):
                await self.human.type_text(other, profile.referral_other or "Other")

        await self.human.type_text(page.locator("#g-motivation"), self.render_cover_letter(profile))
        await self.human.ensure_checked(page.locator("#g-consent"))
