"""systemd service manager - drives units through systemctl."""

from __future__ import annotations

import logging

from solopool.errors import (
    ServiceManagerError,
    ServiceNotFoundError,
    ServicePermissionError,
)
from solopool.models.records import CommandResult, ObservedState
from solopool.proc import EXIT_NOT_FOUND, Runner, run_command

log = logging.getLogger(__name__)

_NOT_FOUND_MARKERS = ("not found", "not loaded", "could not be found", "no such file")
_PERMISSION_MARKERS = (
    "a password is required",
    "access denied",
    "interactive authentication required",
    "permission denied",
    "not in the sudoers",
)


class SystemdServiceManager:
    """Start/stop/query systemd units.

    start/stop go through ``sudo -n systemctl`` (non-interactive, so a missing
    sudo rule fails fast instead of prompting). Queries need no privilege.
    """

    def __init__(
        self,
        use_sudo: bool = True,
        systemctl: str = "systemctl",
        timeout: float = 90,
        runner: Runner = run_command,
    ) -> None:
        self._use_sudo = use_sudo
        self._systemctl = systemctl
        self._timeout = timeout
        self._run = runner

    def _privileged(self, *args: str) -> list[str]:
        cmd = [self._systemctl, *args]
        if self._use_sudo:
            return ["sudo", "-n", *cmd]
        return cmd

    async def start(self, unit: str) -> None:
        # --no-block: submit the job and return, like the other async requests
        result = await self._run(self._privileged("start", "--no-block", unit), timeout=self._timeout)
        self._check(unit, "start", result)
        log.info("Requested start of %s", unit)

    async def stop(self, unit: str) -> None:
        result = await self._run(self._privileged("stop", "--no-block", unit), timeout=self._timeout)
        self._check(unit, "stop", result)
        log.info("Requested stop of %s", unit)

    async def is_active(self, unit: str) -> bool:
        result = await self._run([self._systemctl, "is-active", unit], timeout=30)
        return result.returncode == 0

    async def observe(self, unit: str) -> ObservedState:
        result = await self._run([self._systemctl, "is-active", unit], timeout=30)
        if result.returncode == 0:
            return ObservedState.ACTIVE
        return ObservedState.parse(result.stdout)

    @staticmethod
    def _check(unit: str, action: str, result: CommandResult) -> None:
        if result.ok:
            return
        text = f"{result.stderr}\n{result.stdout}".strip()
        lowered = text.lower()
        if any(m in lowered for m in _PERMISSION_MARKERS):
            raise ServicePermissionError(unit, f"{action} denied: {text}")
        if any(m in lowered for m in _NOT_FOUND_MARKERS) and result.returncode != EXIT_NOT_FOUND:
            raise ServiceNotFoundError(unit, f"unit not found: {text}")
        raise ServiceManagerError(
            unit, f"{action} failed (exit {result.returncode}): {text or 'no output'}"
        )
