"""Protocol interfaces for all solopool components."""

from solopool.interfaces.service import ServiceManager
from solopool.interfaces.probe import ReadinessProbe
from solopool.interfaces.logs import LogSource
from solopool.interfaces.wallet import WalletCli, WalletProvisioner

__all__ = [
    "ServiceManager",
    "ReadinessProbe",
    "LogSource",
    "WalletCli", "WalletProvisioner",
]
