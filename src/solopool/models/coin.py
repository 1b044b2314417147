"""Coin profiles - the immutable per-coin wiring built from configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from solopool.models.config import CoinId

if TYPE_CHECKING:
    from solopool.interfaces.probe import ReadinessProbe
    from solopool.interfaces.wallet import WalletProvisioner
    from solopool.systemd.handle import ServiceHandle


@dataclass(frozen=True)
class Dependency:
    """Directed edge to another coin's published wallet service.

    The dependent sequencer only observes ``service`` through the service
    manager; it never looks inside the other coin's sequencer.
    """

    coin: CoinId
    service: ServiceHandle


@dataclass(frozen=True)
class CoinProfile:
    """Everything a sequencer needs to bring one coin up."""

    coin: CoinId
    display_name: str
    node: ServiceHandle
    probe: ReadinessProbe
    stratum: ServiceHandle | None = None  # None: stratum run by another coin
    wallet: ServiceHandle | None = None
    provisioner: WalletProvisioner | None = None
    depends_on: Dependency | None = None
    stratum_port: int | None = None
    stratum_owner: CoinId | None = None  # set when stratum is None

    @property
    def tag(self) -> str:
        return self.coin.tag
