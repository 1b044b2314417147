"""Configuration models for the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CoinId(str, Enum):
    """Supported coins, in fixed fleet order."""

    BTC = "btc"
    BCH = "bch"
    DGB = "dgb"
    XMR = "xmr"
    XTM = "xtm"
    ALEO = "aleo"

    @property
    def tag(self) -> str:
        return self.value.upper()


class MergeMiningMode(str, Enum):
    """Which of the Monero/Tari stacks run, and whether Tari merge-mines on Monero."""

    MONERO_ONLY = "monero_only"
    MERGE = "merge"
    TARI_ONLY = "tari_only"

    @classmethod
    def parse(cls, value: str | None) -> MergeMiningMode | None:
        """Parse a mode string. ``None``/``"none"``/``""`` disable both coins."""
        if value is None:
            return None
        v = str(value).strip().lower()
        if v in ("", "none", "disabled", "off", "false"):
            return None
        if v == "merged":  # legacy spelling from the shell tooling
            return cls.MERGE
        return cls(v)

    @property
    def runs_monero(self) -> bool:
        return self in (MergeMiningMode.MONERO_ONLY, MergeMiningMode.MERGE)

    @property
    def runs_tari(self) -> bool:
        return self in (MergeMiningMode.TARI_ONLY, MergeMiningMode.MERGE)


class NetworkMode(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


@dataclass
class TimingConfig:
    """Poll intervals and settle delays, in seconds."""

    responsive_interval: float = 5
    responsive_attempts: int = 60
    sync_interval: float = 30
    dependency_interval: float = 30
    settle_delay: float = 5  # wait after wallet/stratum start before is-active
    address_retry_delay: float = 2
    address_attempts: int = 3
    stop_verify_interval: float = 2
    stop_verify_attempts: int = 15
    restart_pause: float = 5


@dataclass
class CoinConfig:
    """Per-coin settings. Unset ports/dirs are derived from the base dir and network."""

    enabled: bool = False
    rpc_port: int | None = None
    rpc_user: str = ""
    rpc_password: str = ""
    stratum_port: int | None = None
    node_dir: str = ""
    wallet_dir: str = ""
    conf_file: str = ""  # bitcoin-style node conf holding rpcuser/rpcpassword


@dataclass
class ServiceConfig:
    """An auxiliary service (dashboard, payment processor) that is started but not orchestrated."""

    enabled: bool = False
    unit: str = ""


@dataclass
class OrchestratorConfig:
    """Complete orchestrator configuration."""

    base_dir: str = "/opt/solopool"
    network: NetworkMode = NetworkMode.MAINNET
    merge_mining_mode: MergeMiningMode | None = None
    use_sudo: bool = True
    log_level: str = "info"
    aleo_network: str = "testnet"  # snarkOS REST path segment

    coins: dict[CoinId, CoinConfig] = field(
        default_factory=lambda: {coin: CoinConfig() for coin in CoinId}
    )
    timing: TimingConfig = field(default_factory=TimingConfig)
    webui: ServiceConfig = field(
        default_factory=lambda: ServiceConfig(enabled=False, unit="solo-pool-webui")
    )
    payments: ServiceConfig = field(
        default_factory=lambda: ServiceConfig(enabled=True, unit="solo-pool-payments")
    )

    def coin(self, coin: CoinId) -> CoinConfig:
        return self.coins.setdefault(coin, CoinConfig())

    def is_enabled(self, coin: CoinId) -> bool:
        """Monero and Tari are governed by the merge-mining mode, the rest by their flag."""
        mode = self.merge_mining_mode
        if coin == CoinId.XMR:
            return mode is not None and mode.runs_monero
        if coin == CoinId.XTM:
            return mode is not None and mode.runs_tari
        return self.coin(coin).enabled

    def enabled_coins(self) -> list[CoinId]:
        return [coin for coin in CoinId if self.is_enabled(coin)]

    def needs_payments(self) -> bool:
        return self.payments.enabled and any(
            self.is_enabled(c) for c in (CoinId.XMR, CoinId.XTM, CoinId.ALEO)
        )
