"""Bitcoin-family readiness probe (BTC, BCH, DGB) via JSON-RPC getblockchaininfo."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from solopool.models.records import SyncState

log = logging.getLogger(__name__)


def read_conf_credentials(conf_file: str | Path) -> tuple[str, str]:
    """Pull ``rpcuser``/``rpcpassword`` out of a bitcoind-style conf file.

    Returns empty strings for anything not found.
    """
    user = password = ""
    p = Path(conf_file)
    if not p.is_file():
        return user, password
    for raw in p.read_text(errors="replace").splitlines():
        line = raw.strip()
        if line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if key == "rpcuser" and not user:
            user = value.strip()
        elif key == "rpcpassword" and not password:
            password = value.strip()
    return user, password


def parse_blockchain_info(info: dict) -> SyncState:
    """Turn a getblockchaininfo result into a SyncState."""
    progress = float(info.get("verificationprogress") or 0.0)
    return SyncState.from_progress(
        height=int(info.get("blocks") or 0),
        target_height=int(info.get("headers") or 0),
        fraction=progress,
        detail="verificationprogress",
    )


class BitcoinRpcProbe:
    """Readiness probe for bitcoind-compatible nodes."""

    def __init__(
        self,
        rpc_url: str,
        rpc_user: str = "",
        rpc_password: str = "",
        timeout: float = 10,
    ) -> None:
        self._rpc_url = rpc_url.rstrip("/")
        self._auth = httpx.BasicAuth(rpc_user, rpc_password) if rpc_user else None
        self._timeout = timeout

    async def _call(self, method: str, params: list | None = None) -> dict:
        payload = {"jsonrpc": "1.0", "id": "solopool", "method": method, "params": params or []}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(self._rpc_url, json=payload, auth=self._auth)
            # bitcoind answers RPC errors with HTTP 500 and a JSON error body
            body = resp.json() if resp.headers.get("content-type", "").startswith("application/json") else None
            if body is None:
                resp.raise_for_status()
                raise ValueError(f"non-JSON response from {method}")
            if body.get("error"):
                raise ValueError(f"{method} error: {body['error']}")
            return body.get("result") or {}

    async def is_node_responsive(self) -> bool:
        try:
            await self._call("getblockchaininfo")
            return True
        except (httpx.HTTPError, ValueError) as exc:
            log.debug("getblockchaininfo not ready at %s: %s", self._rpc_url, exc)
            return False

    async def poll_sync_state(self) -> SyncState | None:
        try:
            info = await self._call("getblockchaininfo")
        except (httpx.HTTPError, ValueError) as exc:
            log.debug("getblockchaininfo failed at %s: %s", self._rpc_url, exc)
            return None
        return parse_blockchain_info(info)
