"""Pytest configuration and fixtures."""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from ats_autofill.automation.events import EventLogger
from ats_autofill.automation.human import Human, Pacing
from ats_autofill.config import PacingProfile, Settings
from ats_autofill.profile import sample_profile

LOCATOR_ASYNC_METHODS = (
    "scroll_into_view_if_needed",
    "hover",
    "click",
    "fill",
    "press_sequentially",
    "select_option",
    "is_checked",
    "set_input_files",
    "wait_for",
    "count",
    "inner_text",
    "text_content",
    "all_inner_texts",
    "get_attribute",
    "evaluate",
    "input_value",
)


def make_locator(**return_values) -> MagicMock:
    """Build a Playwright-like locator whose async methods are AsyncMocks.

    ``first`` and ``nth()`` return the locator itself unless overridden.
    """
    locator = MagicMock()
    for name in LOCATOR_ASYNC_METHODS:
        setattr(locator, name, AsyncMock(return_value=return_values.get(name)))
    locator.first = locator
    locator.nth = MagicMock(return_value=locator)
    locator.locator = MagicMock(return_value=locator)
    return locator


@pytest.fixture
def locator_factory():
    """Factory for fake locators."""
    return make_locator


@pytest.fixture
def fake_sleep():
    """Awaitable sleep that returns immediately and records its arguments."""
    return AsyncMock(name="sleep")


@pytest.fixture
def fast_human(fake_sleep):
    """Primitives with fast pacing, a seeded RNG and no real sleeping."""
    return Human(Pacing.fast(), sleep=fake_sleep, rng=random.Random(7))


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the environment."""
    return Settings(
        pacing_profile=PacingProfile.FAST,
        screenshot_dir=None,
        resume_path=str(tmp_path / "resume.pdf"),
    )


@pytest.fixture
def events():
    """Event sink writing to the standard ``ats_autofill.events`` logger."""
    return EventLogger()


@pytest.fixture
def profile():
    """Complete, valid applicant profile."""
    return sample_profile
