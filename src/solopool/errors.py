"""Exception taxonomy for the orchestrator.

Fatal errors propagate to the CLI, which maps them to exit status 1.
Degradations (slow node, missing seed backup, inactive wallet service) are
logged warnings and never raised.
"""

from __future__ import annotations


class SolopoolError(Exception):
    """Base class for all orchestrator errors."""


class ConfigurationError(SolopoolError):
    """Configuration failed to load. Raised before any service is touched."""


class ServiceManagerError(SolopoolError):
    """A start/stop request to the service manager failed outright."""

    def __init__(self, unit: str, message: str) -> None:
        super().__init__(f"{unit}: {message}")
        self.unit = unit


class ServiceNotFoundError(ServiceManagerError):
    """The service unit is unknown to the service manager."""


class ServicePermissionError(ServiceManagerError):
    """Privilege escalation for the service manager failed."""


class ProbeTimeoutError(SolopoolError):
    """A bounded wait step with a FAIL policy ran out of attempts."""


class WalletError(SolopoolError):
    """Wallet provisioning failed."""


class MissingSecretError(WalletError):
    """The wallet password (or Aleo private key) file is absent or empty."""


class WalletCliError(WalletError):
    """A wallet CLI command exited non-zero."""


class StratumVerificationError(SolopoolError):
    """The stratum service was not active after its settle delay."""

    def __init__(self, unit: str) -> None:
        super().__init__(f"stratum service {unit} is not active after start")
        self.unit = unit
