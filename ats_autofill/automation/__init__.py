"""Form automation core for job applications.

This module provides:
- Human: humanized interaction primitives and their pacing policy
- retry: bounded exponential backoff for flaky UI waits
- EventLogger: structured step logging
- Shared profile/result models
"""

from ats_autofill.automation.events import EventLogger
from ats_autofill.automation.human import Human, Pacing
from ats_autofill.automation.models import (
    ApplicantProfile,
    ApplicationResult,
    AutomationError,
    FailureReason,
)
from ats_autofill.automation.retry import RetryPolicy, retry

__all__ = [
    # Primitives
    "Human",
    "Pacing",
    # Retry
    "RetryPolicy",
    "retry",
    # Logging
    "EventLogger",
    # Models
    "ApplicantProfile",
    "ApplicationResult",
    "AutomationError",
    "FailureReason",
]
