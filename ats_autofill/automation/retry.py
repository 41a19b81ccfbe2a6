"""Bounded retry with exponential backoff and jitter.

Only wrap operations whose every failure mode is safe to repeat. Multi-step
operations must reset their own state at the start of each attempt.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ats_autofill.automation.events import EventLogger

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """Retry configuration plus labels used when reporting attempts."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    base_delay_ms: int = Field(default=250, ge=0)
    max_delay_ms: int = Field(default=1200, ge=0)
    jitter_ms: int = Field(default=120, ge=0)

    platform: str = "core"
    step: str = "retry"
    action: str = "action"


def backoff_delay_ms(policy: RetryPolicy, attempt: int, rng: random.Random) -> int:
    """Delay to wait after failed attempt number ``attempt`` (1-based)."""
    backoff = min(policy.max_delay_ms, policy.base_delay_ms * 2 ** (attempt - 1))
    return backoff + rng.randint(0, policy.jitter_ms)


async def retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    events: EventLogger | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rng: random.Random | None = None,
) -> T:
    """Run ``operation`` until it succeeds or ``policy.max_attempts`` is reached.

    Args:
        operation: Zero-argument coroutine function
        policy: Attempt/delay bounds and reporting labels
        events: Sink for attempt and failure events
        sleep: Awaitable sleep (seconds), injectable for tests
        rng: Random source for jitter

    Returns:
        The first successful result

    Raises:
        Exception: the last failure, unchanged, once attempts are exhausted
    """
    policy = policy or RetryPolicy()
    events = events or EventLogger()
    rng = rng or random.Random()

    attempt = 1
    while True:
        if attempt == 1:
            events.info(
                policy.platform, policy.step, f"try {policy.action}",
                attempt=attempt, tries=policy.max_attempts,
            )
        else:
            events.warning(
                policy.platform, policy.step, f"retrying {policy.action}",
                attempt=attempt, tries=policy.max_attempts,
            )

        try:
            return await operation()
        except Exception as e:
            if attempt >= policy.max_attempts:
                events.error(
                    policy.platform, policy.step, f"{policy.action} failed; giving up",
                    attempt=attempt, tries=policy.max_attempts, error=str(e) or type(e).__name__,
                )
                raise

            delay = backoff_delay_ms(policy, attempt, rng)
            events.warning(
                policy.platform, policy.step, f"{policy.action} failed; waiting before retry",
                attempt=attempt, tries=policy.max_attempts, delay_ms=delay,
                error=str(e) or type(e).__name__,
            )
            await sleep(delay / 1000)
            attempt += 1
