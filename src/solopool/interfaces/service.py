"""ServiceManager protocol - start/stop/query named service units."""

from __future__ import annotations

from typing import Protocol

from solopool.models.records import ObservedState


class ServiceManager(Protocol):
    """Requests state changes from the system service manager.

    ``start``/``stop`` only submit the request; callers poll ``is_active``.
    """

    async def start(self, unit: str) -> None:
        """Request that ``unit`` start. Raises ServiceManagerError on outright failure."""
        ...

    async def stop(self, unit: str) -> None:
        """Request that ``unit`` stop. Raises ServiceManagerError on outright failure."""
        ...

    async def is_active(self, unit: str) -> bool:
        """Authoritative, uncached activity check."""
        ...

    async def observe(self, unit: str) -> ObservedState:
        """Current observed state of ``unit``."""
        ...
