"""Aleo keypair check - the pool keypair is generated at install time, never here."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from solopool.errors import MissingSecretError
from solopool.models.records import WalletRecord

log = logging.getLogger(__name__)

PRIVATE_KEY_NAME = "pool-wallet.privatekey"
ADDRESS_NAME = "pool-wallet.address"


class KeypairWalletProvisioner:
    """Verifies the pre-generated Aleo keypair and reports its address."""

    def __init__(self, wallet_dir: str | Path, coin: str = "aleo") -> None:
        self._keys = Path(wallet_dir) / "keys"
        self._coin = coin

    async def ensure_wallet(self) -> WalletRecord:
        key = self._keys / PRIVATE_KEY_NAME
        if not key.is_file() or not key.read_text().strip():
            raise MissingSecretError(f"Aleo private key not found at {key}")

        address_file = self._keys / ADDRESS_NAME
        address = address_file.read_text().strip() if address_file.is_file() else ""
        if address:
            log.info("[%s] Wallet address: %s...", self._coin.upper(), address[:20])
        else:
            log.warning("[%s] Could not read wallet address file %s", self._coin.upper(), address_file)

        created = datetime.fromtimestamp(key.stat().st_mtime, timezone.utc)
        return WalletRecord(
            coin=self._coin,
            address=address or None,
            initialized_at=created.replace(microsecond=0).isoformat(),
            backup_path=None,
        )
