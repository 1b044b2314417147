"""Synthetic profiles, RPC payloads and wallet directories for testing."""

from __future__ import annotations

from pathlib import Path

from solopool.models.coin import CoinProfile, Dependency
from solopool.models.config import CoinId
from solopool.models.records import SyncState
from solopool.profiles import DISPLAY_NAMES, NODE_UNITS, WALLET_UNITS
from solopool.systemd.handle import ServiceHandle

from tests.mocks import MockProbe

MONERO_ADDRESS = "4" + "8A" * 47
TARI_ADDRESS = "f" * 64


def make_profile(
    coin: CoinId,
    manager,
    probe=None,
    stratum: str | None = "default",
    wallet: bool | None = None,
    provisioner=None,
    depends_on: CoinId | None = None,
    stratum_owner: CoinId | None = None,
) -> CoinProfile:
    """Build a CoinProfile wired to ``manager`` with real ServiceHandles."""
    if stratum == "default":
        stratum = f"pool-{coin.value}-test"
    if wallet is None:
        wallet = coin in WALLET_UNITS
    dep = None
    if depends_on is not None:
        dep = Dependency(depends_on, ServiceHandle(WALLET_UNITS[depends_on], manager))
    return CoinProfile(
        coin=coin,
        display_name=DISPLAY_NAMES[coin],
        node=ServiceHandle(NODE_UNITS[coin], manager),
        probe=probe or MockProbe(),
        stratum=ServiceHandle(stratum, manager) if stratum else None,
        wallet=ServiceHandle(WALLET_UNITS[coin], manager) if wallet else None,
        provisioner=provisioner,
        depends_on=dep,
        stratum_port=3333 if stratum else None,
        stratum_owner=stratum_owner,
    )


def make_sync_state(fraction: float, height: int = 900, target: int = 1000) -> SyncState:
    return SyncState.from_progress(height, target, fraction, detail="test")


def make_blockchain_info(
    blocks: int = 840_000,
    headers: int = 840_000,
    progress: float = 0.9999,
) -> dict:
    return {
        "chain": "main",
        "blocks": blocks,
        "headers": headers,
        "verificationprogress": progress,
        "initialblockdownload": progress < 0.999,
    }


def make_get_info(
    height: int = 3_100_000,
    target_height: int = 3_100_000,
    synchronized: bool = False,
) -> dict:
    return {
        "height": height,
        "target_height": target_height,
        "synchronized": synchronized,
        "status": "OK",
    }


def make_wallet_dir(root: Path, password: str | None = "hunter2") -> Path:
    """Wallet directory with ``keys/`` and, unless None, a password file."""
    wallet = root / "wallet"
    keys = wallet / "keys"
    keys.mkdir(parents=True)
    if password is not None:
        (keys / "pool-wallet.password").write_text(password + "\n")
    return wallet
