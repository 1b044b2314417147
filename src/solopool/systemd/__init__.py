"""systemd integration - service manager adapter and per-unit handles."""

from solopool.systemd.handle import ServiceHandle
from solopool.systemd.manager import SystemdServiceManager

__all__ = ["ServiceHandle", "SystemdServiceManager"]
