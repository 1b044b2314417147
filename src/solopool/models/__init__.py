"""Data models for the solopool orchestrator."""

from solopool.models.config import (
    CoinConfig,
    CoinId,
    MergeMiningMode,
    NetworkMode,
    OrchestratorConfig,
    ServiceConfig,
    TimingConfig,
)
from solopool.models.policy import ExhaustionAction, RetryPolicy
from solopool.models.records import (
    SYNC_THRESHOLD,
    CoinStartupResult,
    CommandResult,
    DesiredState,
    FleetReport,
    ObservedState,
    ServiceState,
    SyncState,
    WalletRecord,
)
from solopool.models.coin import CoinProfile, Dependency

__all__ = [
    "CoinConfig", "CoinId", "MergeMiningMode", "NetworkMode",
    "OrchestratorConfig", "ServiceConfig", "TimingConfig",
    "ExhaustionAction", "RetryPolicy",
    "SYNC_THRESHOLD", "CoinStartupResult", "CommandResult", "DesiredState",
    "FleetReport", "ObservedState", "ServiceState", "SyncState", "WalletRecord",
    "CoinProfile", "Dependency",
]
