"""Shared models for automation module.

The applicant profile is read by every adapter and never mutated, and
``ApplicationResult`` is the single value handed back to callers for every
submission attempt, successful or not.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExperienceLevel(str, Enum):
    """Years-of-experience bucket."""

    ENTRY = "0-1"
    JUNIOR = "1-3"
    MID = "3-5"
    SENIOR = "5-10"
    STAFF = "10+"


class Education(str, Enum):
    """Highest completed education level."""

    HIGH_SCHOOL = "high-school"
    ASSOCIATES = "associates"
    BACHELORS = "bachelors"
    MASTERS = "masters"
    PHD = "phd"


class ReferralSource(str, Enum):
    """How the applicant heard about the role."""

    LINKEDIN = "linkedin"
    COMPANY_WEBSITE = "company-website"
    JOB_BOARD = "job-board"
    REFERRAL = "referral"
    UNIVERSITY = "university"
    OTHER = "other"


class ApplicantProfile(BaseModel):
    """Canonical applicant data shared by all ATS adapters."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: str
    phone: str
    location: str
    linkedin: str | None = None
    portfolio: str | None = None
    experience_level: ExperienceLevel
    education: Education
    school: str
    skills: tuple[str, ...] = ()
    work_authorized: bool
    requires_visa: bool | None = None
    earliest_start_date: str  # YYYY-MM-DD
    salary_expectation: str | None = None
    referral_source: ReferralSource
    referral_other: str | None = None
    cover_letter: str

    @property
    def full_name(self) -> str:
        """First and last name joined by a space."""
        return f"{self.first_name} {self.last_name}"

    @property
    def city(self) -> str:
        """City part of ``location`` ("San Francisco, CA" -> "San Francisco")."""
        return self.location.split(",")[0].strip() or self.location


class FailureReason(str, Enum):
    """Why a submission did not produce a confirmation."""

    NO_ADAPTER = "no_adapter"  # No registered adapter claimed the page
    NAVIGATION = "navigation"  # Target URL could not be loaded
    SUBMISSION = "submission"  # Adapter flow failed
    BROWSER = "browser"  # Browsing context could not be acquired or released


class ApplicationResult(BaseModel):
    """Outcome of one submission attempt.

    Exactly one of ``confirmation_id`` / ``error`` is populated.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    confirmation_id: str | None = None
    error: str | None = None
    failure_reason: FailureReason | None = None
    duration_ms: int = Field(default=0, ge=0)
    platform: str | None = None
    screenshot_path: str | None = None

    @model_validator(mode="after")
    def _check_outcome(self) -> "ApplicationResult":
        if self.success:
            if not self.confirmation_id:
                raise ValueError("successful result requires a confirmation_id")
            if self.error is not None or self.failure_reason is not None:
                raise ValueError("successful result cannot carry an error")
        else:
            if not self.error:
                raise ValueError("failed result requires an error description")
            if self.confirmation_id is not None:
                raise ValueError("failed result cannot carry a confirmation_id")
            if self.failure_reason is None:
                raise ValueError("failed result requires a failure_reason")
        return self

    @classmethod
    def succeeded(
        cls,
        confirmation_id: str,
        duration_ms: int = 0,
        platform: str | None = None,
        screenshot_path: str | None = None,
    ) -> "ApplicationResult":
        """Build a success-shaped result."""
        return cls(
            success=True,
            confirmation_id=confirmation_id,
            duration_ms=duration_ms,
            platform=platform,
            screenshot_path=screenshot_path,
        )

    @classmethod
    def failed(
        cls,
        error: str,
        reason: FailureReason,
        duration_ms: int = 0,
        platform: str | None = None,
        screenshot_path: str | None = None,
    ) -> "ApplicationResult":
        """Build a failure-shaped result."""
        return cls(
            success=False,
            error=error or reason.value,
            failure_reason=reason,
            duration_ms=duration_ms,
            platform=platform,
            screenshot_path=screenshot_path,
        )

    def with_duration(self, duration_ms: int) -> "ApplicationResult":
        """Return a copy with ``duration_ms`` replaced."""
        return self.model_copy(update={"duration_ms": max(0, duration_ms)})


class AutomationError(Exception):
    """Base class for errors raised inside an adapter flow."""


class SectionTimeoutError(AutomationError):
    """A form section never became interactive within its wait budget."""


class ConfirmationError(AutomationError):
    """The confirmation surface rendered without a usable reference."""


class FieldMismatchError(AutomationError):
    """A control did not end up holding the requested value."""
