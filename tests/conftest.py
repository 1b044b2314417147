"""Shared fixtures for solopool tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from solopool.models.config import (
    CoinConfig,
    CoinId,
    MergeMiningMode,
    OrchestratorConfig,
    ServiceConfig,
)

from tests.mocks import FakeSleep, MockServiceManager


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add orchestrator info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Service manager"] = "in-memory mock (no systemd)"
    meta["Coins"] = ", ".join(c.tag for c in CoinId)


def pytest_html_results_summary(prefix, summary, postfix):
    """Note in the report summary that no real daemons were touched."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>All node, wallet and pool daemons are simulated.</strong><br/>"
        "RPC endpoints are local aiohttp servers; sleeps are recorded, not waited."
        "</div>"
    )


def make_test_config(enabled: tuple[CoinId, ...] = (CoinId.BTC,), **overrides) -> OrchestratorConfig:
    """Build an OrchestratorConfig suitable for testing.

    ``enabled`` flags the non-Monero/Tari coins; Monero and Tari follow
    ``merge_mining_mode``.
    """
    coins = {coin: CoinConfig(enabled=coin in enabled) for coin in CoinId}
    defaults = dict(
        base_dir="/nonexistent/solopool",
        merge_mining_mode=None,
        use_sudo=False,
        coins=coins,
        webui=ServiceConfig(enabled=False, unit="solo-pool-webui"),
        payments=ServiceConfig(enabled=True, unit="solo-pool-payments"),
    )
    defaults.update(overrides)
    return OrchestratorConfig(**defaults)


@pytest.fixture
def test_config():
    """Bitcoin-only config."""
    return make_test_config()


@pytest.fixture
def full_config():
    """Every coin enabled, Tari merge-mining on Monero, dashboard on."""
    return make_test_config(
        enabled=(CoinId.BTC, CoinId.BCH, CoinId.DGB, CoinId.ALEO),
        merge_mining_mode=MergeMiningMode.MERGE,
        webui=ServiceConfig(enabled=True, unit="solo-pool-webui"),
    )


@pytest.fixture
def manager():
    return MockServiceManager()


@pytest.fixture
def fake_sleep():
    return FakeSleep()
