"""Wallet provisioner - idempotent one-time wallet setup at the marker-file boundary.

On-disk layout under the coin's wallet directory::

    .initialized              WalletRecord as JSON, written last
    keys/pool-wallet.password pre-provisioned secret (read only)
    keys/pool-wallet.address  receiving address, 0644
    keys/SEED_BACKUP.txt      recovery seed, 0600

A crash before the marker is written makes the next run repeat every step;
the wallet-exists check turns the repeated creation into a no-op.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path

from solopool.errors import MissingSecretError, WalletCliError
from solopool.interfaces.wallet import WalletCli
from solopool.models.records import WalletRecord

log = logging.getLogger(__name__)

MARKER_NAME = ".initialized"
PASSWORD_NAME = "pool-wallet.password"
ADDRESS_NAME = "pool-wallet.address"
SEED_BACKUP_NAME = "SEED_BACKUP.txt"


def _iso(ts: float | None = None) -> str:
    dt = datetime.fromtimestamp(ts, timezone.utc) if ts is not None else datetime.now(timezone.utc)
    return dt.replace(microsecond=0).isoformat()


def write_private(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` readable by the owner only."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(text)
    os.chmod(path, 0o600)


def write_public(path: Path, text: str) -> None:
    path.write_text(text)
    os.chmod(path, 0o644)


class WalletProvisioner:
    """Creates a pool wallet once, backs up its seed and records its address."""

    def __init__(
        self,
        coin: str,
        wallet_dir: str | Path,
        cli: WalletCli,
        address_pattern: str | re.Pattern[str],
        address_attempts: int = 3,
        address_retry_delay: float = 2,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._coin = coin
        self._dir = Path(wallet_dir)
        self._keys = self._dir / "keys"
        self._cli = cli
        self._address_re = re.compile(address_pattern, re.MULTILINE) if isinstance(
            address_pattern, str
        ) else address_pattern
        self._address_attempts = max(1, address_attempts)
        self._address_retry_delay = address_retry_delay
        self._sleep = sleep

    @property
    def marker_path(self) -> Path:
        return self._dir / MARKER_NAME

    @property
    def address_path(self) -> Path:
        return self._keys / ADDRESS_NAME

    @property
    def backup_path(self) -> Path:
        return self._keys / SEED_BACKUP_NAME

    @property
    def password_path(self) -> Path:
        return self._keys / PASSWORD_NAME

    # ── Record persistence ─────────────────────────────────

    def load_record(self) -> WalletRecord | None:
        """The persisted record, or None if the wallet was never provisioned."""
        marker = self.marker_path
        if not marker.is_file():
            return None

        raw = marker.read_text().strip()
        if raw:
            try:
                return WalletRecord.from_dict(json.loads(raw))
            except (ValueError, KeyError, TypeError):
                log.warning("[%s] Unreadable wallet marker %s, treating as legacy", self._coin.upper(), marker)

        # Legacy marker: an empty file touched by the old shell tooling
        address = None
        if self.address_path.is_file():
            address = self.address_path.read_text().strip() or None
        return WalletRecord(
            coin=self._coin,
            address=address,
            initialized_at=_iso(marker.stat().st_mtime),
            backup_path=str(self.backup_path) if self.backup_path.is_file() else None,
        )

    def _write_marker(self, record: WalletRecord) -> None:
        tmp = self.marker_path.with_name(MARKER_NAME + ".tmp")
        tmp.write_text(json.dumps(record.to_dict(), indent=2) + "\n")
        os.replace(tmp, self.marker_path)

    # ── Provisioning ───────────────────────────────────────

    async def ensure_wallet(self) -> WalletRecord:
        tag = self._coin.upper()
        existing = self.load_record()
        if existing is not None:
            log.info("[%s] Wallet already initialized", tag)
            return existing

        log.info("[%s] Initializing pool wallet...", tag)
        password = self._read_password()
        self._keys.mkdir(parents=True, exist_ok=True)

        if self._cli.wallet_exists():
            log.info("[%s] Wallet data exists, skipping creation", tag)
        else:
            log.info("[%s] Creating new wallet...", tag)
            await self._cli.create(password)

        backup = await self._export_seed(password)
        address = await self._extract_address(password)
        if address:
            write_public(self.address_path, address + "\n")
            log.info("[%s] Wallet address: %s...", tag, address[:20])

        record = WalletRecord(
            coin=self._coin,
            address=address,
            initialized_at=_iso(),
            backup_path=str(backup) if backup else None,
        )
        self._write_marker(record)
        log.info("[%s] Wallet initialized", tag)

        if backup:
            log.warning("[%s] *** BACKUP %s immediately! ***", tag, backup)
        else:
            log.warning(
                "[%s] *** NO SEED BACKUP WAS WRITTEN. Export the seed from %s and back it up immediately! ***",
                tag, self._dir,
            )
        return record

    def _read_password(self) -> str:
        p = self.password_path
        try:
            password = p.read_text().strip()
        except OSError:
            password = ""
        if not password:
            raise MissingSecretError(f"wallet password file missing or empty: {p}")
        return password

    async def _export_seed(self, password: str) -> Path | None:
        log.info("[%s] Exporting seed words for backup...", self._coin.upper())
        try:
            seed = await self._cli.export_seed(password)
        except WalletCliError as exc:
            log.warning("[%s] Seed export failed: %s", self._coin.upper(), exc)
            return None
        if not seed.strip():
            log.warning("[%s] Seed export returned nothing", self._coin.upper())
            return None
        write_private(self.backup_path, seed if seed.endswith("\n") else seed + "\n")
        return self.backup_path

    async def _extract_address(self, password: str) -> str | None:
        tag = self._coin.upper()
        log.info("[%s] Extracting wallet address...", tag)
        for attempt in range(1, self._address_attempts + 1):
            try:
                output = await self._cli.get_address(password)
            except WalletCliError as exc:
                log.debug("[%s] get-address attempt %d failed: %s", tag, attempt, exc)
                output = ""
            m = self._address_re.search(output)
            if m:
                return m.group(0)
            if attempt < self._address_attempts:
                await self._sleep(self._address_retry_delay)
        log.warning(
            "[%s] Could not extract wallet address after %d attempts; recover it manually",
            tag, self._address_attempts,
        )
        return None
