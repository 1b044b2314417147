"""Configuration to CoinProfile wiring."""

from __future__ import annotations

from pathlib import Path

import pytest

from solopool.models.config import CoinConfig, CoinId, MergeMiningMode, NetworkMode
from solopool.probes import AleoRestProbe, BitcoinRpcProbe, MoneroRpcProbe, TariLogProbe
from solopool.profiles import (
    MERGE_PROXY_UNIT,
    build_profile,
    build_profiles,
    rpc_port,
    stratum_port,
    stratum_unit,
    wallet_dir,
)
from solopool.wallet import KeypairWalletProvisioner, WalletProvisioner

from tests.conftest import make_test_config


def test_only_enabled_coins_in_fleet_order(manager):
    cfg = make_test_config(enabled=(CoinId.ALEO, CoinId.BTC), merge_mining_mode=MergeMiningMode.TARI_ONLY)
    assert [p.coin for p in build_profiles(cfg, manager)] == [CoinId.BTC, CoinId.XTM, CoinId.ALEO]


def test_only_filter(manager):
    cfg = make_test_config(enabled=(CoinId.BTC, CoinId.BCH))
    assert [p.coin for p in build_profiles(cfg, manager, only=[CoinId.BCH])] == [CoinId.BCH]


def test_merge_mode_graph(manager):
    cfg = make_test_config(enabled=(), merge_mining_mode=MergeMiningMode.MERGE)
    xmr, xtm = build_profiles(cfg, manager)

    assert xmr.stratum is None
    assert xmr.stratum_owner == CoinId.XTM
    assert xmr.wallet.name == "wallet-xmr-rpc"
    assert isinstance(xmr.probe, MoneroRpcProbe)
    assert isinstance(xmr.provisioner, WalletProvisioner)

    assert xtm.stratum.name == MERGE_PROXY_UNIT
    assert xtm.stratum_port == 3338
    assert xtm.depends_on.coin == CoinId.XMR
    assert xtm.depends_on.service.name == "wallet-xmr-rpc"
    assert isinstance(xtm.probe, TariLogProbe)


def test_monero_only_has_no_dependency(manager):
    cfg = make_test_config(enabled=(), merge_mining_mode=MergeMiningMode.MONERO_ONLY)
    (xmr,) = build_profiles(cfg, manager)
    assert xmr.stratum.name == "pool-xmr-monero-pool"
    assert xmr.depends_on is None


@pytest.mark.parametrize(
    "coin,mode,unit",
    [
        (CoinId.BTC, None, "pool-btc-ckpool"),
        (CoinId.XMR, MergeMiningMode.MERGE, None),
        (CoinId.XTM, MergeMiningMode.TARI_ONLY, "pool-xtm-minotari-miner"),
        (CoinId.XTM, MergeMiningMode.MERGE, "pool-xmr-xtm-merge-proxy"),
        (CoinId.ALEO, None, "pool-aleo"),
    ],
)
def test_stratum_unit(coin, mode, unit):
    assert stratum_unit(coin, mode) == unit


@pytest.mark.parametrize(
    "coin,network,port",
    [
        (CoinId.BTC, NetworkMode.MAINNET, 8332),
        (CoinId.BTC, NetworkMode.TESTNET, 48332),
        (CoinId.BCH, NetworkMode.TESTNET, 48334),
        (CoinId.DGB, NetworkMode.MAINNET, 14022),
        (CoinId.XMR, NetworkMode.TESTNET, 38081),
        (CoinId.XTM, NetworkMode.MAINNET, 18142),
        (CoinId.ALEO, NetworkMode.MAINNET, 3030),
    ],
)
def test_default_rpc_ports(coin, network, port):
    assert rpc_port(make_test_config(network=network), coin) == port


def test_explicit_ports_win():
    cfg = make_test_config()
    cfg.coins[CoinId.BTC] = CoinConfig(enabled=True, rpc_port=18443, stratum_port=4444)
    assert rpc_port(cfg, CoinId.BTC) == 18443
    assert stratum_port(cfg, CoinId.BTC) == 4444


def test_wallet_dir_under_node_dir():
    cfg = make_test_config(base_dir="/srv/pool")
    assert wallet_dir(cfg, CoinId.XMR) == Path("/srv/pool/node/xmr/wallet")


def test_bitcoin_credentials_from_conf(tmp_path, manager):
    conf = tmp_path / "node" / "btc" / "config" / "bitcoin.conf"
    conf.parent.mkdir(parents=True)
    conf.write_text("rpcuser=pool\nrpcpassword=pw\n")
    cfg = make_test_config(base_dir=str(tmp_path))
    profile = build_profile(cfg, CoinId.BTC, manager)
    assert isinstance(profile.probe, BitcoinRpcProbe)
    assert profile.probe._auth is not None


def test_aleo_uses_keypair_provisioner(manager):
    cfg = make_test_config(enabled=(CoinId.ALEO,))
    profile = build_profile(cfg, CoinId.ALEO, manager)
    assert isinstance(profile.probe, AleoRestProbe)
    assert isinstance(profile.provisioner, KeypairWalletProvisioner)
    assert profile.wallet is None
    assert profile.stratum_port == 3339
