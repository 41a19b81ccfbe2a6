"""Sample applicant profile used by the CLI demo and the end-to-end tests."""

from ats_autofill.automation.models import (
    ApplicantProfile,
    Education,
    ExperienceLevel,
    ReferralSource,
)

SAMPLE_COVER_LETTER = (
    "Dear {{company}} Hiring Team,\n"
    "I am excited to apply for this role at {{company}}. Over the past four years "
    "I have built and shipped full-stack features in TypeScript and Python, "
    "owned services end to end, and worked closely with product and design. "
    "I would love to bring that experience to {{company}}.\n"
    "Best regards,\n"
    "{{full_name}}"
)

sample_profile = ApplicantProfile(
    first_name="Jordan",
    last_name="Rivera",
    email="jordan.rivera@example.com",
    phone="+1 (555) 123-4567",
    location="San Francisco, CA",
    linkedin="https://linkedin.com/in/jordanrivera",
    portfolio="https://jordanrivera.dev",
    experience_level=ExperienceLevel.MID,
    education=Education.BACHELORS,
    school="Stanford University",
    skills=("javascript", "typescript", "python", "react", "nodejs", "sql"),
    work_authorized=True,
    requires_visa=False,
    earliest_start_date="2026-01-15",
    salary_expectation="$85,000",
    referral_source=ReferralSource.LINKEDIN,
    cover_letter=SAMPLE_COVER_LETTER,
)
