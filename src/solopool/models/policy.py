"""Retry policies attached to each wait step of a startup sequence."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ExhaustionAction(str, Enum):
    """What a wait step does when it runs out of attempts."""

    DEGRADE = "degrade"  # log a warning and carry on
    FAIL = "fail"  # raise ProbeTimeoutError


@dataclass(frozen=True)
class RetryPolicy:
    """Polling policy: check every ``interval`` seconds, at most ``max_attempts`` times.

    ``max_attempts=None`` polls forever (blockchain sync, cross-coin dependency).
    """

    interval: float
    max_attempts: int | None = None
    on_exhaustion: ExhaustionAction = ExhaustionAction.DEGRADE

    @property
    def unbounded(self) -> bool:
        return self.max_attempts is None

    def allows(self, attempt: int) -> bool:
        """True if attempt number ``attempt`` (1-based) may run."""
        return self.max_attempts is None or attempt <= self.max_attempts

    @classmethod
    def forever(cls, interval: float) -> RetryPolicy:
        return cls(interval=interval, max_attempts=None)
