"""Per-coin startup state machine.

    NOT_STARTED -> NODE_STARTING -> NODE_RESPONSIVE -> SYNCING -> SYNCED
      -> [WALLET_PROVISIONING -> WALLET_STARTING] -> [DEPENDENCY_WAIT]
      -> STRATUM_STARTING -> VERIFIED

Any fatal error moves the sequencer to FAILED. Slow nodes, missing seed
backups and inactive wallet services are recorded as notes and the sequence
carries on.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from solopool.errors import SolopoolError, StratumVerificationError
from solopool.models.coin import CoinProfile
from solopool.models.config import TimingConfig
from solopool.models.policy import ExhaustionAction, RetryPolicy
from solopool.models.records import CoinStartupResult, SyncState, WalletRecord
from solopool.wait import Sleep, poll_until, wait_until

log = logging.getLogger(__name__)


class SequencerState(str, Enum):
    NOT_STARTED = "not_started"
    NODE_STARTING = "node_starting"
    NODE_RESPONSIVE = "node_responsive"
    SYNCING = "syncing"
    SYNCED = "synced"
    WALLET_PROVISIONING = "wallet_provisioning"
    WALLET_STARTING = "wallet_starting"
    DEPENDENCY_WAIT = "dependency_wait"
    STRATUM_STARTING = "stratum_starting"
    VERIFIED = "verified"
    FAILED = "failed"


class CoinSequencer:
    """Drives one coin from a stopped node to a verified stratum."""

    def __init__(
        self,
        profile: CoinProfile,
        timing: TimingConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        timing = timing or TimingConfig()
        self.profile = profile
        self.state = SequencerState.NOT_STARTED
        self.history: list[SequencerState] = [SequencerState.NOT_STARTED]
        self._sleep = sleep
        self._settle_delay = timing.settle_delay
        self._notes: list[str] = []
        self._wallet: WalletRecord | None = None
        self._error: str | None = None

        self.responsive_policy = RetryPolicy(
            interval=timing.responsive_interval,
            max_attempts=timing.responsive_attempts,
            on_exhaustion=ExhaustionAction.DEGRADE,
        )
        self.sync_policy = RetryPolicy.forever(timing.sync_interval)
        self.dependency_policy = RetryPolicy.forever(timing.dependency_interval)

    @property
    def tag(self) -> str:
        return self.profile.tag

    def _enter(self, state: SequencerState) -> None:
        log.debug("[%s] %s -> %s", self.tag, self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _note(self, message: str) -> None:
        log.warning("[%s] %s", self.tag, message)
        self._notes.append(message)

    def fail(self, exc: BaseException) -> CoinStartupResult:
        """Move to FAILED and return the final result."""
        self._error = str(exc)
        log.error("[%s] Startup failed in %s: %s", self.tag, self.state.value, exc)
        self._enter(SequencerState.FAILED)
        return self.result()

    def result(self) -> CoinStartupResult:
        return CoinStartupResult(
            coin=self.profile.coin.value,
            state=self.state.value,
            wallet=self._wallet,
            notes=list(self._notes),
            error=self._error,
        )

    # ── Stages ─────────────────────────────────────────────

    async def start_node(self) -> None:
        """Request the node start. Does not wait for it."""
        log.info("[%s] Starting %s node...", self.tag, self.profile.display_name)
        self._enter(SequencerState.NODE_STARTING)
        await self.profile.node.start()

    async def run_remaining(self) -> CoinStartupResult:
        """Every stage after the node start request."""
        if self.state == SequencerState.FAILED:
            return self.result()
        try:
            await self._wait_responsive()
            await self._wait_synced()
            if self.profile.provisioner is not None:
                await self._provision_wallet()
            if self.profile.wallet is not None:
                await self._start_wallet()
            if self.profile.depends_on is not None:
                await self._wait_dependency()
            if self.profile.stratum is not None:
                await self._start_stratum()
            else:
                owner = self.profile.stratum_owner
                self._notes.append(f"stratum handled by {owner.value if owner else 'another coin'}")
                log.info("[%s] Stratum is handled by %s", self.tag, owner.tag if owner else "another coin")
        except SolopoolError as exc:
            return self.fail(exc)

        self._enter(SequencerState.VERIFIED)
        log.info("[%s] Startup complete", self.tag)
        return self.result()

    async def run(self) -> CoinStartupResult:
        try:
            await self.start_node()
        except SolopoolError as exc:
            return self.fail(exc)
        return await self.run_remaining()

    async def _wait_responsive(self) -> None:
        log.info("[%s] Waiting for node to be responsive...", self.tag)
        ok = await wait_until(
            self.profile.probe.is_node_responsive,
            self.responsive_policy,
            f"[{self.tag}] node responsive",
            sleep=self._sleep,
        )
        if ok:
            self.profile.node.mark_running()
            log.info("[%s] Node is responsive", self.tag)
        else:
            self._note(
                f"node not responsive after {self.responsive_policy.max_attempts} attempts; "
                "continuing to sync polling"
            )
        self._enter(SequencerState.NODE_RESPONSIVE)

    async def _wait_synced(self) -> None:
        self._enter(SequencerState.SYNCING)
        log.info("[%s] Waiting for blockchain sync...", self.tag)
        state = await poll_until(
            self.profile.probe.poll_sync_state,
            lambda s: s is not None and s.synced,
            self.sync_policy,
            f"[{self.tag}] blockchain sync",
            sleep=self._sleep,
            on_value=self._log_progress,
        )
        self._enter(SequencerState.SYNCED)
        if state is not None:
            log.info("[%s] Blockchain synced (%s)", self.tag, state.detail or "progress")

    def _log_progress(self, attempt: int, state: SyncState | None) -> None:
        if state is None:
            log.info("[%s] Waiting for node to report sync state...", self.tag)
        elif state.target_height:
            log.info(
                "[%s] Sync progress: %.2f%% (%d/%d)",
                self.tag, state.percent, state.height, state.target_height,
            )
        else:
            log.info("[%s] Sync progress: %.2f%%", self.tag, state.percent)

    async def _provision_wallet(self) -> None:
        self._enter(SequencerState.WALLET_PROVISIONING)
        self._wallet = await self.profile.provisioner.ensure_wallet()
        if self._wallet.address is None:
            self._notes.append("wallet address unknown; recover it manually")
        if self._wallet.backup_path is None and self.profile.wallet is not None:
            self._notes.append("no seed backup on record")

    async def _start_wallet(self) -> None:
        self._enter(SequencerState.WALLET_STARTING)
        wallet = self.profile.wallet
        log.info("[%s] Starting wallet service...", self.tag)
        await wallet.start()
        await self._sleep(self._settle_delay)
        if await wallet.is_active():
            wallet.mark_running()
            log.info("[%s] Wallet service running", self.tag)
        else:
            self._note(f"wallet service {wallet.name} is not active; check journalctl -u {wallet.name}")

    async def _wait_dependency(self) -> None:
        self._enter(SequencerState.DEPENDENCY_WAIT)
        dep = self.profile.depends_on
        log.info("[%s] Waiting for %s (%s) to be active...", self.tag, dep.service.name, dep.coin.tag)
        await wait_until(
            dep.service.is_active,
            self.dependency_policy,
            f"[{self.tag}] dependency {dep.service.name}",
            sleep=self._sleep,
        )
        log.info("[%s] %s is active", self.tag, dep.service.name)

    async def _start_stratum(self) -> None:
        self._enter(SequencerState.STRATUM_STARTING)
        stratum = self.profile.stratum
        log.info("[%s] Starting stratum %s...", self.tag, stratum.name)
        await stratum.start()
        await self._sleep(self._settle_delay)
        if not await stratum.is_active():
            raise StratumVerificationError(stratum.name)
        stratum.mark_running()
        log.info("[%s] Stratum running on port %s", self.tag, self.profile.stratum_port)
