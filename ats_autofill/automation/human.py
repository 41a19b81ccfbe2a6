"""Humanized interaction primitives.

Every UI action an adapter performs goes through ``Human`` so that nothing is
instantaneous: each click is preceded by a scroll and a hover, each keystroke
has its own delay, and every action is followed by a short pause. Delay bounds
live in a ``Pacing`` value so that test runs and demo runs can use different
presets without touching adapter code.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable

from playwright.async_api import Locator
from pydantic import BaseModel, ConfigDict, Field, field_validator

Range = tuple[int, int]
Sleep = Callable[[float], Awaitable[None]]


def is_slow_char(ch: str) -> bool:
    """Digits and punctuation are typed more deliberately than letters."""
    return not (ch.isspace() or ("a" <= ch <= "z") or ("A" <= ch <= "Z"))


class Pacing(BaseModel):
    """Delay bounds (inclusive, milliseconds) for every primitive."""

    model_config = ConfigDict(frozen=True)

    step_pause: Range = (60, 220)
    scroll_settle: Range = (80, 200)
    hover_settle: Range = (50, 160)
    post_click: Range = (80, 220)
    char_delay: Range = (10, 35)
    symbol_delay: Range = (55, 140)
    post_type: Range = (80, 200)
    upload_settle: Range = (150, 350)
    reading: Range = (600, 1600)
    action_timeout_ms: int = Field(default=10000, gt=0)

    @field_validator(
        "step_pause",
        "scroll_settle",
        "hover_settle",
        "post_click",
        "char_delay",
        "symbol_delay",
        "post_type",
        "upload_settle",
        "reading",
    )
    @classmethod
    def _check_range(cls, value: Range) -> Range:
        low, high = value
        if low < 0 or high < low:
            raise ValueError(f"invalid delay range {value}")
        return value

    @classmethod
    def realistic(cls) -> "Pacing":
        """Human-like cadence used for real and demo runs."""
        return cls()

    @classmethod
    def fast(cls) -> "Pacing":
        """Near-zero delays for test runs; ordering is unchanged."""
        return cls(
            step_pause=(0, 5),
            scroll_settle=(0, 5),
            hover_settle=(0, 5),
            post_click=(0, 5),
            char_delay=(0, 2),
            symbol_delay=(0, 3),
            post_type=(0, 5),
            upload_settle=(0, 5),
            reading=(0, 10),
        )


class Human:
    """Interaction primitives bound to one pacing policy.

    Holds no per-page state, so a single instance can be shared by every
    adapter and every submission.

    Usage:
        human = Human(Pacing.realistic())
        await human.type_text(page.locator("#email"), profile.email)
        await human.hover_then_click(page.locator("#submit"))
    """

    def __init__(
        self,
        pacing: Pacing | None = None,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.pacing = pacing or Pacing.realistic()
        self._sleep = sleep
        self._rng = rng or random.Random()

    @property
    def timeout(self) -> int:
        """Bound for every individual element action (ms)."""
        return self.pacing.action_timeout_ms

    def _pick(self, bounds: Range) -> int:
        return self._rng.randint(bounds[0], bounds[1])

    async def pause(self, min_ms: int | None = None, max_ms: int | None = None) -> int:
        """Sleep for a uniformly random duration in ``[min_ms, max_ms]``.

        Returns:
            The chosen delay in milliseconds
        """
        low = self.pacing.step_pause[0] if min_ms is None else min_ms
        high = self.pacing.step_pause[1] if max_ms is None else max_ms
        if high < low:
            raise ValueError(f"max_ms ({high}) must be >= min_ms ({low})")
        ms = self._rng.randint(low, high)
        await self._sleep(ms / 1000)
        return ms

    async def _settle(self, bounds: Range) -> None:
        await self.pause(*bounds)

    async def reading_pause(self) -> None:
        """Longer pause between major form sections."""
        await self._settle(self.pacing.reading)

    async def scroll_into_view(self, locator: Locator) -> None:
        """Bring ``locator`` into the viewport, then pause.

        Already-visible elements are not scrolled but still get the pause.
        """
        await locator.scroll_into_view_if_needed(timeout=self.timeout)
        await self._settle(self.pacing.scroll_settle)

    async def hover_then_click(self, locator: Locator) -> None:
        """Scroll, hover, pause, click, pause."""
        await self.scroll_into_view(locator)
        await locator.hover(timeout=self.timeout)
        await self._settle(self.pacing.hover_settle)
        await locator.click(timeout=self.timeout)
        await self._settle(self.pacing.post_click)

    async def type_text(self, locator: Locator, text: str) -> None:
        """Replace the field's content with ``text``, one key at a time."""
        await self.scroll_into_view(locator)
        await locator.click(timeout=self.timeout)
        await locator.fill("", timeout=self.timeout)

        for ch in text:
            bounds = self.pacing.symbol_delay if is_slow_char(ch) else self.pacing.char_delay
            await locator.press_sequentially(ch, delay=self._pick(bounds), timeout=self.timeout)

        await self._settle(self.pacing.post_type)

    async def select_option(self, locator: Locator, value: str) -> None:
        """Choose ``value`` in a native ``<select>``."""
        await self.scroll_into_view(locator)
        await locator.select_option(value, timeout=self.timeout)
        await self._settle(self.pacing.post_click)

    async def fill_value(self, locator: Locator, value: str) -> None:
        """Set a value directly (date pickers and similar inputs)."""
        await self.scroll_into_view(locator)
        await locator.fill(value, timeout=self.timeout)
        await self._settle(self.pacing.post_type)

    async def ensure_checked(self, locator: Locator) -> None:
        """Click a checkbox or radio only if it is not already checked."""
        await self.scroll_into_view(locator)
        if not await locator.is_checked(timeout=self.timeout):
            await self.hover_then_click(locator)

    async def upload(self, locator: Locator, path: str) -> None:
        """Attach a file to an ``<input type=file>``."""
        await self.scroll_into_view(locator)
        await locator.set_input_files(path, timeout=self.timeout)
        await self._settle(self.pacing.upload_settle)
