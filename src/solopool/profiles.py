"""Build the CoinProfile graph from configuration.

Unit names, default ports and on-disk layout live here; nothing else in the
package knows which daemon backs which coin.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from solopool.interfaces.service import ServiceManager
from solopool.models.coin import CoinProfile, Dependency
from solopool.models.config import CoinId, MergeMiningMode, NetworkMode, OrchestratorConfig
from solopool.probes.aleo import AleoRestProbe
from solopool.probes.bitcoin import BitcoinRpcProbe, read_conf_credentials
from solopool.probes.journal import JournalLogSource
from solopool.probes.monero import MoneroRpcProbe, read_rpc_login
from solopool.probes.tari import TariLogProbe
from solopool.proc import Runner, run_command
from solopool.systemd.handle import ServiceHandle
from solopool.wait import Sleep
from solopool.wallet.aleo import KeypairWalletProvisioner
from solopool.wallet.monero import MoneroWalletCli
from solopool.wallet.provisioner import WalletProvisioner
from solopool.wallet.tari import TariWalletCli

log = logging.getLogger(__name__)

DISPLAY_NAMES = {
    CoinId.BTC: "Bitcoin",
    CoinId.BCH: "Bitcoin Cash",
    CoinId.DGB: "DigiByte",
    CoinId.XMR: "Monero",
    CoinId.XTM: "Tari",
    CoinId.ALEO: "Aleo",
}

NODE_UNITS = {
    CoinId.BTC: "node-btc-bitcoind",
    CoinId.BCH: "node-bch-bchn",
    CoinId.DGB: "node-dgb-digibyted",
    CoinId.XMR: "node-xmr-monerod",
    CoinId.XTM: "node-xtm-minotari",
    CoinId.ALEO: "node-aleo-snarkos",
}

WALLET_UNITS = {
    CoinId.XMR: "wallet-xmr-rpc",
    CoinId.XTM: "wallet-xtm",
}

MONERO_POOL_UNIT = "pool-xmr-monero-pool"
MERGE_PROXY_UNIT = "pool-xmr-xtm-merge-proxy"
TARI_MINER_UNIT = "pool-xtm-minotari-miner"

_FIXED_STRATUM_UNITS = {
    CoinId.BTC: "pool-btc-ckpool",
    CoinId.BCH: "pool-bch-ckpool",
    CoinId.DGB: "pool-dgb-ckpool",
    CoinId.ALEO: "pool-aleo",
}

# (mainnet, testnet)
DEFAULT_RPC_PORTS = {
    CoinId.BTC: (8332, 48332),
    CoinId.BCH: (8334, 48334),
    CoinId.DGB: (14022, 14023),
    CoinId.XMR: (18081, 38081),
    CoinId.XTM: (18142, 18142),
    CoinId.ALEO: (3030, 3030),
}

DEFAULT_STRATUM_PORTS = {
    CoinId.BTC: 3333,
    CoinId.BCH: 3334,
    CoinId.DGB: 3335,
    CoinId.XMR: 3336,
    CoinId.XTM: 3337,
    CoinId.ALEO: 3339,
}
MERGE_STRATUM_PORT = 3338

_BITCOIN_CONF = {
    CoinId.BTC: "bitcoin.conf",
    CoinId.BCH: "bitcoin.conf",
    CoinId.DGB: "digibyte.conf",
}


def stratum_unit(coin: CoinId, mode: MergeMiningMode | None) -> str | None:
    """The pool unit that serves ``coin``, or None when another coin's unit does."""
    if coin in _FIXED_STRATUM_UNITS:
        return _FIXED_STRATUM_UNITS[coin]
    if coin == CoinId.XMR:
        return MONERO_POOL_UNIT if mode == MergeMiningMode.MONERO_ONLY else None
    if coin == CoinId.XTM:
        if mode == MergeMiningMode.MERGE:
            return MERGE_PROXY_UNIT
        if mode == MergeMiningMode.TARI_ONLY:
            return TARI_MINER_UNIT
    return None


def node_dir(config: OrchestratorConfig, coin: CoinId) -> Path:
    explicit = config.coin(coin).node_dir
    return Path(explicit) if explicit else Path(config.base_dir) / "node" / coin.value


def wallet_dir(config: OrchestratorConfig, coin: CoinId) -> Path:
    explicit = config.coin(coin).wallet_dir
    return Path(explicit) if explicit else node_dir(config, coin) / "wallet"


def rpc_port(config: OrchestratorConfig, coin: CoinId) -> int:
    explicit = config.coin(coin).rpc_port
    if explicit:
        return explicit
    mainnet, testnet = DEFAULT_RPC_PORTS[coin]
    return testnet if config.network == NetworkMode.TESTNET else mainnet


def stratum_port(config: OrchestratorConfig, coin: CoinId) -> int:
    explicit = config.coin(coin).stratum_port
    if explicit:
        return explicit
    if coin == CoinId.XTM and config.merge_mining_mode == MergeMiningMode.MERGE:
        return MERGE_STRATUM_PORT
    return DEFAULT_STRATUM_PORTS[coin]


def _bitcoin_probe(config: OrchestratorConfig, coin: CoinId) -> BitcoinRpcProbe:
    cc = config.coin(coin)
    user, password = cc.rpc_user, cc.rpc_password
    if not user:
        conf = Path(cc.conf_file) if cc.conf_file else node_dir(config, coin) / "config" / _BITCOIN_CONF[coin]
        user, password = read_conf_credentials(conf)
        if not user:
            log.debug("[%s] No RPC credentials in %s", coin.tag, conf)
    return BitcoinRpcProbe(f"http://127.0.0.1:{rpc_port(config, coin)}", user, password)


def _monero_probe(config: OrchestratorConfig) -> MoneroRpcProbe:
    cc = config.coin(CoinId.XMR)
    user, password = cc.rpc_user, cc.rpc_password
    if not user:
        user, password = read_rpc_login(node_dir(config, CoinId.XMR) / "config")
    return MoneroRpcProbe(f"http://127.0.0.1:{rpc_port(config, CoinId.XMR)}", user, password)


def build_profile(
    config: OrchestratorConfig,
    coin: CoinId,
    manager: ServiceManager,
    sleep: Sleep = asyncio.sleep,
    runner: Runner = run_command,
) -> CoinProfile:
    """Wire one coin's handles, probe and provisioner."""
    mode = config.merge_mining_mode
    timing = config.timing
    testnet = config.network == NetworkMode.TESTNET

    node = ServiceHandle(NODE_UNITS[coin], manager)
    unit = stratum_unit(coin, mode)
    stratum = ServiceHandle(unit, manager) if unit else None
    wallet = ServiceHandle(WALLET_UNITS[coin], manager) if coin in WALLET_UNITS else None
    provisioner = None
    depends_on = None
    stratum_owner = None

    if coin in (CoinId.BTC, CoinId.BCH, CoinId.DGB):
        probe = _bitcoin_probe(config, coin)

    elif coin == CoinId.XMR:
        probe = _monero_probe(config)
        wdir = wallet_dir(config, coin)
        cli = MoneroWalletCli(
            node_dir(config, coin) / "bin" / "monero-wallet-cli",
            wdir / "keys" / "pool-wallet",
            f"127.0.0.1:{rpc_port(config, coin)}",
            stagenet=testnet,
            runner=runner,
        )
        provisioner = WalletProvisioner(
            coin.value, wdir, cli, cli.address_pattern,
            address_attempts=timing.address_attempts,
            address_retry_delay=timing.address_retry_delay,
            sleep=sleep,
        )
        if stratum is None:
            stratum_owner = CoinId.XTM

    elif coin == CoinId.XTM:
        probe = TariLogProbe(JournalLogSource(NODE_UNITS[coin], runner), rpc_port(config, coin))
        wdir = wallet_dir(config, coin)
        cli = TariWalletCli(
            node_dir(config, coin) / "bin" / "minotari_console_wallet",
            wdir / "config" / "config.toml",
            wdir / "data",
            network="esmeralda" if testnet else "mainnet",
            runner=runner,
        )
        provisioner = WalletProvisioner(
            coin.value, wdir, cli, cli.address_pattern,
            address_attempts=timing.address_attempts,
            address_retry_delay=timing.address_retry_delay,
            sleep=sleep,
        )
        if mode == MergeMiningMode.MERGE:
            depends_on = Dependency(CoinId.XMR, ServiceHandle(WALLET_UNITS[CoinId.XMR], manager))

    else:  # ALEO
        probe = AleoRestProbe(
            f"http://127.0.0.1:{rpc_port(config, coin)}",
            config.aleo_network,
            JournalLogSource(NODE_UNITS[coin], runner),
        )
        provisioner = KeypairWalletProvisioner(wallet_dir(config, coin), coin.value)

    return CoinProfile(
        coin=coin,
        display_name=DISPLAY_NAMES[coin],
        node=node,
        probe=probe,
        stratum=stratum,
        wallet=wallet,
        provisioner=provisioner,
        depends_on=depends_on,
        stratum_port=stratum_port(config, coin) if stratum else None,
        stratum_owner=stratum_owner,
    )


def build_profiles(
    config: OrchestratorConfig,
    manager: ServiceManager,
    sleep: Sleep = asyncio.sleep,
    runner: Runner = run_command,
    only: list[CoinId] | None = None,
) -> list[CoinProfile]:
    """Profiles for every enabled coin, in fleet order."""
    coins = config.enabled_coins()
    if only:
        coins = [c for c in coins if c in only]
    return [build_profile(config, c, manager, sleep=sleep, runner=runner) for c in coins]
