"""Async subprocess helper shared by the systemd, journal and wallet adapters."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from solopool.models.records import CommandResult

log = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[CommandResult]]

EXIT_TIMEOUT = 124
EXIT_NOT_FOUND = 127


async def run_command(
    args: Sequence[str],
    timeout: float | None = 60,
    input_text: str | None = None,
) -> CommandResult:
    """Run ``args`` and capture its output.

    A missing executable or a timeout is reported through the return code
    (127 / 124, as a shell would) instead of raising.
    """
    argv = list(args)
    log.debug("exec: %s", " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        return CommandResult(argv, EXIT_NOT_FOUND, "", str(exc))
    except PermissionError as exc:
        return CommandResult(argv, 126, "", str(exc))

    stdin_bytes = input_text.encode() if input_text is not None else None
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(stdin_bytes), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        log.warning("Command timed out after %ss: %s", timeout, argv[0])
        return CommandResult(argv, EXIT_TIMEOUT, "", f"timed out after {timeout}s")

    return CommandResult(
        argv,
        proc.returncode if proc.returncode is not None else -1,
        stdout.decode(errors="replace"),
        stderr.decode(errors="replace"),
    )
