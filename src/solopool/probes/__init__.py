"""Readiness probes - one strategy per family of node daemons."""

from solopool.probes.aleo import AleoRestProbe
from solopool.probes.bitcoin import BitcoinRpcProbe
from solopool.probes.journal import JournalLogSource
from solopool.probes.monero import MoneroRpcProbe
from solopool.probes.tari import TariLogProbe

__all__ = [
    "AleoRestProbe",
    "BitcoinRpcProbe",
    "JournalLogSource",
    "MoneroRpcProbe",
    "TariLogProbe",
]
