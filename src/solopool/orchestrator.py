"""Fleet orchestrator - starts every enabled coin and tears the fleet down in reverse."""

from __future__ import annotations

import asyncio
import logging

from solopool.errors import ServiceManagerError, SolopoolError
from solopool.interfaces.service import ServiceManager
from solopool.models.coin import CoinProfile
from solopool.models.config import CoinId, OrchestratorConfig, ServiceConfig
from solopool.models.policy import ExhaustionAction, RetryPolicy
from solopool.models.records import FleetReport, ServiceState, SyncState
from solopool.profiles import NODE_UNITS, WALLET_UNITS, build_profiles, stratum_unit
from solopool.proc import Runner, run_command
from solopool.sequencer import CoinSequencer
from solopool.systemd.handle import ServiceHandle
from solopool.wait import Sleep, wait_until

log = logging.getLogger(__name__)


class FleetOrchestrator:
    """Top-level driver over all enabled coins."""

    def __init__(
        self,
        config: OrchestratorConfig,
        manager: ServiceManager,
        sleep: Sleep = asyncio.sleep,
        runner: Runner = run_command,
        profiles: list[CoinProfile] | None = None,
    ) -> None:
        self._config = config
        self._manager = manager
        self._sleep = sleep
        self._runner = runner
        self._profiles = profiles
        timing = config.timing
        self.stop_verify_policy = RetryPolicy(
            interval=timing.stop_verify_interval,
            max_attempts=timing.stop_verify_attempts,
            on_exhaustion=ExhaustionAction.DEGRADE,
        )

    def profiles(self, only: list[CoinId] | None = None) -> list[CoinProfile]:
        """Profiles of the enabled coins; prebuilt ones when given at construction."""
        if self._profiles is not None:
            return [p for p in self._profiles if not only or p.coin in only]
        return build_profiles(
            self._config, self._manager, sleep=self._sleep, runner=self._runner, only=only
        )

    def _handle(self, unit: str) -> ServiceHandle:
        return ServiceHandle(unit, self._manager)

    # ── Unit inventory ─────────────────────────────────────

    def node_units(self) -> list[str]:
        return [NODE_UNITS[c] for c in self._config.enabled_coins()]

    def wallet_units(self) -> list[str]:
        return [WALLET_UNITS[c] for c in self._config.enabled_coins() if c in WALLET_UNITS]

    def pool_units(self) -> list[str]:
        mode = self._config.merge_mining_mode
        units = []
        for coin in self._config.enabled_coins():
            unit = stratum_unit(coin, mode)
            if unit:
                units.append(unit)
        return units

    def aux_units(self) -> list[str]:
        units = []
        if self._config.webui.enabled:
            units.append(self._config.webui.unit)
        if self._config.payments.enabled:
            units.append(self._config.payments.unit)
        return units

    def shutdown_tiers(self) -> list[tuple[str, list[str]]]:
        """(tier name, units) in stop order. Each tier reverses the enable order."""
        tiers = []
        if self._config.webui.enabled:
            tiers.append(("dashboard", [self._config.webui.unit]))
        if self._config.payments.enabled:
            tiers.append(("payments", [self._config.payments.unit]))
        tiers.append(("pools", list(reversed(self.pool_units()))))
        tiers.append(("wallets", list(reversed(self.wallet_units()))))
        tiers.append(("nodes", list(reversed(self.node_units()))))
        return [(name, units) for name, units in tiers if units]

    # ── Auxiliary services ─────────────────────────────────

    async def _start_aux(self, service: ServiceConfig, label: str) -> None:
        log.info("[%s] Starting %s...", label, service.unit)
        try:
            await self._handle(service.unit).start()
        except ServiceManagerError as exc:
            log.warning("[%s] Could not start %s: %s", label, service.unit, exc)

    async def _start_aux_services(self) -> None:
        if self._config.webui.enabled:
            await self._start_aux(self._config.webui, "WEBUI")
        if self._config.needs_payments():
            await self._start_aux(self._config.payments, "PAYMENTS")

    # ── Startup ────────────────────────────────────────────

    async def start_all(self, only: list[CoinId] | None = None) -> FleetReport:
        """Request every node, then run all coin sequencers concurrently."""
        await self._start_aux_services()

        sequencers = [CoinSequencer(p, self._config.timing, sleep=self._sleep) for p in self.profiles(only)]
        if not sequencers:
            log.info("No coins enabled, nothing to start")
            return FleetReport()

        log.info("Starting blockchain nodes: %s", ", ".join(s.tag for s in sequencers))
        for seq in sequencers:
            try:
                await seq.start_node()
            except SolopoolError as exc:
                seq.fail(exc)

        outcomes = await asyncio.gather(
            *(seq.run_remaining() for seq in sequencers), return_exceptions=True
        )
        report = FleetReport()
        for seq, outcome in zip(sequencers, outcomes):
            if isinstance(outcome, BaseException):
                log.error("[%s] Sequencer crashed", seq.tag, exc_info=outcome)
                outcome = seq.fail(outcome)
            report.results.append(outcome)

        for r in report.results:
            if r.ok:
                log.info("[%s] %s%s", r.coin.upper(), r.state, f" ({'; '.join(r.notes)})" if r.notes else "")
            else:
                log.error("[%s] %s: %s", r.coin.upper(), r.state, r.error)
        return report

    async def start_nodes(self) -> None:
        """Request node and wallet services without waiting on them."""
        for unit in self.node_units() + self.wallet_units():
            await self._handle(unit).start()

    async def start_pools(self) -> None:
        """Request stratum services, the dashboard and the payment processor without waiting."""
        for unit in self.pool_units():
            await self._handle(unit).start()
        await self._start_aux_services()

    # ── Shutdown ───────────────────────────────────────────

    async def _all_inactive(self, units: list[str]) -> bool:
        for unit in units:
            if await self._manager.is_active(unit):
                return False
        return True

    async def _stop_tier(self, name: str, units: list[str], tolerant: bool) -> ServiceManagerError | None:
        log.info("Stopping %s: %s", name, ", ".join(units))
        first_error = None
        for unit in units:
            try:
                await self._handle(unit).stop()
            except ServiceManagerError as exc:
                if tolerant:
                    log.warning("Could not stop %s: %s", unit, exc)
                else:
                    log.error("Could not stop %s: %s", unit, exc)
                    first_error = first_error or exc

        stopped = await wait_until(
            lambda: self._all_inactive(units),
            self.stop_verify_policy,
            f"{name} inactive",
            sleep=self._sleep,
        )
        if not stopped:
            log.warning("Some %s are still active, continuing shutdown", name)
        return first_error

    async def _stop_tiers(self, tiers: list[tuple[str, list[str]]]) -> None:
        first_error = None
        for name, units in tiers:
            if not units:
                continue
            err = await self._stop_tier(name, units, tolerant=name in ("dashboard", "payments"))
            first_error = first_error or err
        if first_error is not None:
            raise first_error

    async def stop_all(self) -> None:
        """Dashboard, payments, pools, wallets, nodes; each tier verified inactive before the next."""
        await self._stop_tiers(self.shutdown_tiers())
        log.info("All services stopped")

    async def stop_pools(self) -> None:
        await self._stop_tiers([("pools", list(reversed(self.pool_units())))])

    async def stop_nodes(self) -> None:
        await self._stop_tiers([
            ("wallets", list(reversed(self.wallet_units()))),
            ("nodes", list(reversed(self.node_units()))),
        ])

    async def restart_all(self, only: list[CoinId] | None = None) -> FleetReport:
        """Stop everything, pause, start everything. A failed stop never prevents the start."""
        stop_error = None
        try:
            await self.stop_all()
        except ServiceManagerError as exc:
            log.error("Shutdown incomplete, starting anyway: %s", exc)
            stop_error = str(exc)
        await self._sleep(self._config.timing.restart_pause)
        report = await self.start_all(only)
        report.stop_error = stop_error
        return report

    # ── Status ─────────────────────────────────────────────

    async def service_status(self) -> list[ServiceState]:
        units = self.node_units() + self.wallet_units() + self.pool_units() + self.aux_units()
        return [await self._handle(u).state() for u in units]

    async def sync_status(self) -> list[tuple[CoinId, SyncState | None]]:
        """One sync snapshot per enabled coin; None when the node gave no data."""
        profiles = self.profiles()
        snapshots = await asyncio.gather(*(p.probe.poll_sync_state() for p in profiles))
        return list(zip((p.coin for p in profiles), snapshots))
