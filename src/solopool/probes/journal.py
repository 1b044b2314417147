"""journald log source and TCP port check for daemons without a status RPC."""

from __future__ import annotations

import asyncio
import logging

from solopool.proc import Runner, run_command

log = logging.getLogger(__name__)


class JournalLogSource:
    """Recent log lines of a systemd unit via ``journalctl``."""

    def __init__(self, unit: str, runner: Runner = run_command) -> None:
        self._unit = unit
        self._run = runner

    async def tail(self, lines: int) -> list[str]:
        result = await self._run(
            ["journalctl", "-u", self._unit, "--no-pager", "-n", str(lines), "-o", "cat"],
            timeout=15,
        )
        if not result.ok:
            log.debug("journalctl for %s failed: %s", self._unit, result.stderr.strip())
            return []
        return result.stdout.splitlines()


async def port_open(host: str, port: int, timeout: float = 2.0) -> bool:
    """True if ``host:port`` accepts a TCP connection within ``timeout`` seconds."""
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except (OSError, asyncio.TimeoutError):
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True
