"""TOML + environment configuration loading."""

from __future__ import annotations

import pytest

from solopool.config import load_config
from solopool.errors import ConfigurationError
from solopool.models.config import CoinId, MergeMiningMode, NetworkMode

FULL_TOML = """
[pool]
base_dir = "/srv/solopool"
network = "testnet"
merge_mining_mode = "merged"
use_sudo = false
log_level = "debug"

[coins.btc]
enabled = true
rpc_port = 18332
conf_file = "/etc/bitcoin.conf"

[coins.aleo]
enabled = true

[timing]
sync_interval = 10
responsive_attempts = 12

[webui]
enabled = true

[payments]
unit = "my-payments"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("BASE_DIR", "NETWORK", "MERGE_MINING_MODE", "LOG_LEVEL"):
        monkeypatch.delenv(f"SOLOPOOL_{key}", raising=False)
    for coin in CoinId:
        monkeypatch.delenv(f"SOLOPOOL_ENABLE_{coin.tag}", raising=False)


def _write(tmp_path, text):
    p = tmp_path / "solopool.toml"
    p.write_text(text)
    return p


def test_full_file(tmp_path):
    cfg = load_config(_write(tmp_path, FULL_TOML))
    assert cfg.base_dir == "/srv/solopool"
    assert cfg.network == NetworkMode.TESTNET
    assert cfg.merge_mining_mode == MergeMiningMode.MERGE
    assert cfg.use_sudo is False
    assert cfg.coins[CoinId.BTC].rpc_port == 18332
    assert cfg.coins[CoinId.BTC].conf_file == "/etc/bitcoin.conf"
    assert cfg.enabled_coins() == [CoinId.BTC, CoinId.XMR, CoinId.XTM, CoinId.ALEO]
    assert cfg.timing.sync_interval == 10
    assert cfg.timing.responsive_attempts == 12
    assert cfg.timing.responsive_interval == 5
    assert cfg.webui.enabled and cfg.webui.unit == "solo-pool-webui"
    assert cfg.payments.unit == "my-payments"


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.setattr("solopool.config.DEFAULT_CONFIG_PATH", str(tmp_path / "absent.toml"))
    cfg = load_config()
    assert cfg.base_dir == "/opt/solopool"
    assert cfg.enabled_coins() == []
    assert cfg.merge_mining_mode is None


def test_env_overrides_file(tmp_path, monkeypatch):
    monkeypatch.setenv("SOLOPOOL_NETWORK", "mainnet")
    monkeypatch.setenv("SOLOPOOL_MERGE_MINING_MODE", "none")
    monkeypatch.setenv("SOLOPOOL_ENABLE_BTC", "false")
    monkeypatch.setenv("SOLOPOOL_ENABLE_DGB", "1")
    cfg = load_config(_write(tmp_path, FULL_TOML))
    assert cfg.network == NetworkMode.MAINNET
    assert cfg.merge_mining_mode is None
    assert cfg.enabled_coins() == [CoinId.DGB, CoinId.ALEO]


def test_missing_explicit_file_is_error(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "nope.toml")


def test_bad_toml_is_error(tmp_path):
    with pytest.raises(ConfigurationError, match="invalid TOML"):
        load_config(_write(tmp_path, "[pool\nbase_dir = "))


@pytest.mark.parametrize(
    "text",
    [
        '[pool]\nnetwork = "regtest"\n',
        '[pool]\nmerge_mining_mode = "both"\n',
        '[pool]\nlog_level = "loud"\n',
        "[coins.doge]\nenabled = true\n",
        '[coins.btc]\nenabled = "maybe"\n',
        '[coins.btc]\nrpc_port = "eighty"\n',
    ],
)
def test_invalid_values_are_errors(tmp_path, text):
    with pytest.raises(ConfigurationError):
        load_config(_write(tmp_path, text))


def test_bad_env_value_is_error(tmp_path, monkeypatch):
    monkeypatch.setenv("SOLOPOOL_MERGE_MINING_MODE", "sideways")
    with pytest.raises(ConfigurationError):
        load_config(_write(tmp_path, ""))


def test_payments_needed_only_for_payout_coins(tmp_path):
    cfg = load_config(_write(tmp_path, "[coins.btc]\nenabled = true\n"))
    assert not cfg.needs_payments()
    cfg = load_config(_write(tmp_path, '[pool]\nmerge_mining_mode = "monero_only"\n'))
    assert cfg.needs_payments()


def test_monero_tari_enable_flags_warn(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("SOLOPOOL_ENABLE_XMR", "1")
    cfg = load_config(_write(tmp_path, "[coins.xtm]\nenabled = true\n"))
    assert cfg.enabled_coins() == []
    assert "SOLOPOOL_ENABLE_XMR has no effect" in caplog.text
    assert "[coins.xtm] enabled has no effect" in caplog.text
    assert "merge_mining_mode (currently none)" in caplog.text


def test_bitcoin_enable_flag_does_not_warn(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("SOLOPOOL_ENABLE_BTC", "1")
    load_config(_write(tmp_path, ""))
    assert "has no effect" not in caplog.text
