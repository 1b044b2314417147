"""LogSource protocol - recent log lines for daemons without a status endpoint."""

from __future__ import annotations

from typing import Protocol


class LogSource(Protocol):
    async def tail(self, lines: int) -> list[str]:
        """Return up to ``lines`` most recent log lines, oldest first."""
        ...
