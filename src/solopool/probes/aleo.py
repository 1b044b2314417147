"""Aleo readiness probe - snarkOS REST height plus log heuristic."""

from __future__ import annotations

import logging
import re

import httpx

from solopool.interfaces.logs import LogSource
from solopool.models.records import SyncState

log = logging.getLogger(__name__)

_SYNCED = re.compile(r"synced|synchronized", re.IGNORECASE)
_READY = re.compile(r"\bready\b", re.IGNORECASE)
_BLOCK_FRACTION = re.compile(r"(\d+)/(\d+)")


def infer_aleo_sync(height: int, lines: list[str]) -> SyncState:
    """Combine the REST height with the last journal lines."""
    text = "\n".join(lines)
    if _SYNCED.search(text):
        return SyncState(height, height, 1.0, True, detail="log: synced")
    if _READY.search(text):
        return SyncState(height, height, 1.0, True, detail="log: node ready")

    target = 0
    fraction = 0.0
    for line in reversed(lines):
        m = _BLOCK_FRACTION.search(line)
        if m and int(m.group(2)) > 0:
            target = int(m.group(2))
            fraction = int(m.group(1)) / target
            break
    return SyncState(height, target, min(fraction, 0.998), False, detail="log: progress")


class AleoRestProbe:
    """Readiness probe for snarkOS."""

    def __init__(
        self,
        rest_url: str,
        network: str,
        logs: LogSource,
        timeout: float = 10,
    ) -> None:
        self._height_url = f"{rest_url.rstrip('/')}/{network}/latest/height"
        self._logs = logs
        self._timeout = timeout

    async def _latest_height(self) -> int:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.get(self._height_url)
            resp.raise_for_status()
            return int(resp.text.strip())

    async def is_node_responsive(self) -> bool:
        try:
            await self._latest_height()
            return True
        except (httpx.HTTPError, ValueError) as exc:
            log.debug("snarkOS REST not ready at %s: %s", self._height_url, exc)
            return False

    async def poll_sync_state(self) -> SyncState | None:
        try:
            height = await self._latest_height()
        except (httpx.HTTPError, ValueError) as exc:
            log.debug("snarkOS height query failed: %s", exc)
            return None
        if height <= 0:
            return None
        lines = await self._logs.tail(20)
        return infer_aleo_sync(height, lines)
