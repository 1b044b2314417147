"""Monero readiness probe via monerod's HTTP JSON-RPC get_info."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from solopool.models.records import SyncState

log = logging.getLogger(__name__)


def read_rpc_login(config_dir: str | Path) -> tuple[str, str]:
    """Read ``rpc.user`` / ``rpc.password`` files; empty strings when absent."""
    d = Path(config_dir)
    values = []
    for name in ("rpc.user", "rpc.password"):
        p = d / name
        values.append(p.read_text().strip() if p.is_file() else "")
    return values[0], values[1]


def parse_get_info(info: dict) -> SyncState:
    """Turn a get_info result into a SyncState.

    First true condition wins: the ``synchronized`` flag, then
    ``target_height == 0`` (monerod reports 0 once it has caught up, and
    also right after start before it has any peers), then the height ratio.
    """
    height = int(info.get("height") or 0)
    target = int(info.get("target_height") or 0)

    if info.get("synchronized") is True:
        return SyncState(
            height=height,
            target_height=target,
            fraction_complete=1.0,
            synced=True,
            detail="synchronized flag",
        )
    if target == 0:
        return SyncState(
            height=height,
            target_height=0,
            fraction_complete=1.0,
            synced=True,
            detail="target_height 0",
        )
    return SyncState.from_progress(
        height=height,
        target_height=target,
        fraction=height / target,
        detail="height/target_height",
    )


class MoneroRpcProbe:
    """Readiness probe for monerod."""

    def __init__(
        self,
        rpc_url: str,
        rpc_user: str = "",
        rpc_password: str = "",
        timeout: float = 10,
    ) -> None:
        self._url = f"{rpc_url.rstrip('/')}/json_rpc"
        self._auth = httpx.DigestAuth(rpc_user, rpc_password) if rpc_password else None
        self._timeout = timeout

    async def _get_info(self) -> dict:
        payload = {"jsonrpc": "2.0", "id": "0", "method": "get_info"}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(self._url, json=payload, auth=self._auth)
            resp.raise_for_status()
            body = resp.json()
        if body.get("error"):
            raise ValueError(f"get_info error: {body['error']}")
        result = body.get("result")
        if not isinstance(result, dict):
            raise ValueError("get_info returned no result")
        return result

    async def is_node_responsive(self) -> bool:
        try:
            await self._get_info()
            return True
        except (httpx.HTTPError, ValueError) as exc:
            log.debug("get_info not ready at %s: %s", self._url, exc)
            return False

    async def poll_sync_state(self) -> SyncState | None:
        try:
            info = await self._get_info()
        except (httpx.HTTPError, ValueError) as exc:
            log.debug("get_info failed at %s: %s", self._url, exc)
            return None
        return parse_get_info(info)
