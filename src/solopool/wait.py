"""Polling helpers driven by a RetryPolicy."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from solopool.errors import ProbeTimeoutError, SolopoolError
from solopool.models.policy import ExhaustionAction, RetryPolicy

log = logging.getLogger(__name__)

T = TypeVar("T")
Sleep = Callable[[float], Awaitable[None]]


async def poll_until(
    fn: Callable[[], Awaitable[T]],
    predicate: Callable[[T], bool],
    policy: RetryPolicy,
    description: str,
    sleep: Sleep = asyncio.sleep,
    on_value: Callable[[int, T], None] | None = None,
) -> T | None:
    """Call ``fn`` until ``predicate`` accepts its value, sleeping ``policy.interval`` between calls.

    Returns the accepted value. When a bounded policy runs out, returns None
    (DEGRADE) or raises ProbeTimeoutError (FAIL). Exceptions from ``fn`` other
    than SolopoolError count as a failed attempt and are logged.
    """
    attempt = 1
    while policy.allows(attempt):
        try:
            value = await fn()
            if on_value is not None:
                on_value(attempt, value)
            if predicate(value):
                return value
        except SolopoolError:
            raise
        except Exception as e:
            log.warning("%s: caught %s, will keep waiting: %s", description, type(e).__name__, e)

        if not policy.allows(attempt + 1):
            break
        await sleep(policy.interval)
        attempt += 1

    if policy.on_exhaustion == ExhaustionAction.FAIL:
        raise ProbeTimeoutError(f"{description}: gave up after {policy.max_attempts} attempts")
    log.warning("%s: gave up after %d attempts, continuing", description, policy.max_attempts)
    return None


async def wait_until(
    fn: Callable[[], Awaitable[Any]],
    policy: RetryPolicy,
    description: str,
    sleep: Sleep = asyncio.sleep,
) -> bool:
    """Wait until ``fn`` returns a truthy value. False if a DEGRADE policy ran out."""
    result = await poll_until(fn, bool, policy, description, sleep=sleep)
    return result is not None
