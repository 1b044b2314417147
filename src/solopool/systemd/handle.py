"""Service handle - one named unit bound to a service manager."""

from __future__ import annotations

import logging

from solopool.interfaces.service import ServiceManager
from solopool.models.records import DesiredState, ServiceState

log = logging.getLogger(__name__)


class ServiceHandle:
    """A single startable/stoppable unit (node, wallet, pool or dashboard).

    Only the desired state lives here; the observed state is always
    re-queried from the service manager.
    """

    def __init__(self, name: str, manager: ServiceManager) -> None:
        self.name = name
        self._manager = manager
        self._desired = DesiredState.STOPPED

    def __repr__(self) -> str:
        return f"ServiceHandle({self.name!r}, desired={self._desired.value})"

    @property
    def desired(self) -> DesiredState:
        return self._desired

    async def start(self) -> None:
        self._desired = DesiredState.STARTING
        await self._manager.start(self.name)

    async def stop(self) -> None:
        self._desired = DesiredState.STOPPED
        await self._manager.stop(self.name)

    async def is_active(self) -> bool:
        return await self._manager.is_active(self.name)

    def mark_running(self) -> None:
        """Record that the start was verified."""
        self._desired = DesiredState.RUNNING

    async def state(self) -> ServiceState:
        observed = await self._manager.observe(self.name)
        return ServiceState(name=self.name, desired=self._desired, observed=observed)
