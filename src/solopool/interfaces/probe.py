"""ReadinessProbe protocol - per-coin node liveness and sync detection."""

from __future__ import annotations

from typing import Protocol

from solopool.models.records import SyncState


class ReadinessProbe(Protocol):
    """Answers "is the node up?" and "how far along is sync?" for one coin."""

    async def is_node_responsive(self) -> bool:
        """Single non-blocking liveness check."""
        ...

    async def poll_sync_state(self) -> SyncState | None:
        """Single sync snapshot. None when the node returned no usable data."""
        ...
