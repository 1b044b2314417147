"""Wallet protocols - provisioning and the wallet CLI it drives."""

from __future__ import annotations

from typing import Protocol

from solopool.models.records import WalletRecord


class WalletProvisioner(Protocol):
    """Idempotent one-time wallet initializer for one coin."""

    async def ensure_wallet(self) -> WalletRecord:
        """Return the wallet record, creating the wallet on first call."""
        ...


class WalletCli(Protocol):
    """Coin-specific wallet command line."""

    def wallet_exists(self) -> bool:
        """True if wallet data is already on disk (e.g. created at install time)."""
        ...

    async def create(self, password: str) -> None:
        """Create a new wallet. Raises WalletCliError on failure."""
        ...

    async def export_seed(self, password: str) -> str:
        """Return the recovery seed text. Raises WalletCliError on failure."""
        ...

    async def get_address(self, password: str) -> str:
        """Return raw CLI output containing the receiving address."""
        ...
