"""Record types for probe snapshots, wallet state, service state and startup results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

SYNC_THRESHOLD = 0.999


@dataclass(frozen=True)
class SyncState:
    """One snapshot of a node's sync progress. Never persisted."""

    height: int
    target_height: int
    fraction_complete: float
    synced: bool
    detail: str = ""  # which signal decided `synced`

    @classmethod
    def from_progress(
        cls,
        height: int,
        target_height: int,
        fraction: float,
        detail: str = "",
        synchronized: bool = False,
    ) -> SyncState:
        """Build a snapshot, deriving ``synced`` from the threshold or an explicit signal."""
        fraction = max(0.0, min(float(fraction), 1.0))
        synced = synchronized or fraction >= SYNC_THRESHOLD
        return cls(
            height=height,
            target_height=target_height,
            fraction_complete=fraction,
            synced=synced,
            detail=detail,
        )

    @property
    def percent(self) -> float:
        return self.fraction_complete * 100


@dataclass(frozen=True)
class WalletRecord:
    """Outcome of one-time wallet provisioning, persisted in the ``.initialized`` marker."""

    coin: str
    address: str | None
    initialized_at: str  # ISO 8601
    backup_path: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> WalletRecord:
        return cls(
            coin=str(data["coin"]),
            address=data.get("address") or None,
            initialized_at=str(data.get("initialized_at", "")),
            backup_path=data.get("backup_path") or None,
        )


class DesiredState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


class ObservedState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    FAILED = "failed"
    ACTIVATING = "activating"
    DEACTIVATING = "deactivating"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str) -> ObservedState:
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class ServiceState:
    """Desired vs. observed state of one service unit."""

    name: str
    desired: DesiredState
    observed: ObservedState

    @property
    def active(self) -> bool:
        return self.observed == ObservedState.ACTIVE


@dataclass
class CommandResult:
    """Captured result of a subprocess."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class CoinStartupResult:
    """Final outcome of one coin's startup sequence."""

    coin: str
    state: str  # SequencerState value
    wallet: WalletRecord | None = None
    notes: list[str] = field(default_factory=list)  # degradations worth surfacing
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class FleetReport:
    """Outcome of a full fleet startup."""

    results: list[CoinStartupResult] = field(default_factory=list)
    stop_error: str | None = None  # restart only: a stop request that failed before startup

    @property
    def ok(self) -> bool:
        return self.stop_error is None and all(r.ok for r in self.results)

    @property
    def failed(self) -> list[CoinStartupResult]:
        return [r for r in self.results if not r.ok]
