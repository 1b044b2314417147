"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from solopool.errors import ConfigurationError
from solopool.models.config import (
    CoinConfig,
    CoinId,
    MergeMiningMode,
    NetworkMode,
    OrchestratorConfig,
    ServiceConfig,
    TimingConfig,
)

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "/opt/solopool/config/solopool.toml"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")
_MODE_GOVERNED = (CoinId.XMR, CoinId.XTM)


def _bool(value, name: str) -> bool:
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigurationError(f"{name}: expected a boolean, got {value!r}")


def _int(value, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name}: expected an integer, got {value!r}") from None


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "SOLOPOOL_",
) -> OrchestratorConfig:
    """Load orchestrator configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (SOLOPOOL_NETWORK, SOLOPOOL_ENABLE_BTC, etc.)
        2. TOML config file
        3. Defaults from OrchestratorConfig

    An explicitly given path must exist; the default path may be absent.
    Raises ConfigurationError on any unreadable or invalid value.
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if not p.is_file():
            raise ConfigurationError(f"config file not found: {p}")
        raw = _read_toml(p)
    elif Path(DEFAULT_CONFIG_PATH).is_file():
        raw = _read_toml(Path(DEFAULT_CONFIG_PATH))

    cfg = OrchestratorConfig()
    ignored: list[str] = []

    try:
        # ── Pool section ───────────────────────────────────────
        pool = raw.get("pool", {})
        if v := pool.get("base_dir"):
            cfg.base_dir = str(v)
        if v := pool.get("network"):
            cfg.network = NetworkMode(str(v).lower())
        if "merge_mining_mode" in pool:
            cfg.merge_mining_mode = MergeMiningMode.parse(pool["merge_mining_mode"])
        if "use_sudo" in pool:
            cfg.use_sudo = _bool(pool["use_sudo"], "pool.use_sudo")
        if v := pool.get("log_level"):
            cfg.log_level = str(v)
        if v := pool.get("aleo_network"):
            cfg.aleo_network = str(v)

        # ── Coin sections ──────────────────────────────────────
        coins = raw.get("coins", {})
        for key in coins:
            if key not in {c.value for c in CoinId}:
                raise ConfigurationError(f"unknown coin section [coins.{key}]")
        for coin in CoinId:
            cfg.coins[coin] = _coin_config(coins.get(coin.value, {}), coin)
            if coin in _MODE_GOVERNED and "enabled" in coins.get(coin.value, {}):
                ignored.append(f"[coins.{coin.value}] enabled")

        # ── Timing section ─────────────────────────────────────
        timing = raw.get("timing", {})
        t = TimingConfig()
        for name in TimingConfig.__dataclass_fields__:
            if name not in timing:
                continue
            if name.endswith("_attempts"):
                setattr(t, name, _int(timing[name], f"timing.{name}"))
            else:
                setattr(t, name, float(timing[name]))
        cfg.timing = t

        # ── Auxiliary services ─────────────────────────────────
        cfg.webui = _service_config(raw.get("webui", {}), cfg.webui, "webui")
        cfg.payments = _service_config(raw.get("payments", {}), cfg.payments, "payments")
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    # ── Environment variable overrides (highest priority) ──
    try:
        if v := os.environ.get(f"{env_prefix}BASE_DIR"):
            cfg.base_dir = v
        if v := os.environ.get(f"{env_prefix}NETWORK"):
            cfg.network = NetworkMode(v.lower())
        if (v := os.environ.get(f"{env_prefix}MERGE_MINING_MODE")) is not None:
            cfg.merge_mining_mode = MergeMiningMode.parse(v)
        if v := os.environ.get(f"{env_prefix}LOG_LEVEL"):
            cfg.log_level = v
        for coin in CoinId:
            name = f"{env_prefix}ENABLE_{coin.tag}"
            if (v := os.environ.get(name)) is not None:
                cfg.coins[coin].enabled = _bool(v, name)
                if coin in _MODE_GOVERNED:
                    ignored.append(name)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    for name in ignored:
        log.warning(
            "%s has no effect: Monero and Tari are enabled by merge_mining_mode (currently %s)",
            name, cfg.merge_mining_mode.value if cfg.merge_mining_mode else "none",
        )

    if not isinstance(logging.getLevelName(cfg.log_level.upper()), int):
        raise ConfigurationError(f"unknown log level {cfg.log_level!r}")

    cfg.base_dir = str(Path(cfg.base_dir).expanduser())
    return cfg


def _read_toml(p: Path) -> dict:
    try:
        with open(p, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"invalid TOML in {p}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"cannot read {p}: {exc}") from exc


def _coin_config(section: dict, coin: CoinId) -> CoinConfig:
    prefix = f"coins.{coin.value}"
    cc = CoinConfig()
    if "enabled" in section:
        cc.enabled = _bool(section["enabled"], f"{prefix}.enabled")
    if v := section.get("rpc_port"):
        cc.rpc_port = _int(v, f"{prefix}.rpc_port")
    if v := section.get("stratum_port"):
        cc.stratum_port = _int(v, f"{prefix}.stratum_port")
    if v := section.get("rpc_user"):
        cc.rpc_user = str(v)
    if v := section.get("rpc_password"):
        cc.rpc_password = str(v)
    if v := section.get("node_dir"):
        cc.node_dir = str(Path(str(v)).expanduser())
    if v := section.get("wallet_dir"):
        cc.wallet_dir = str(Path(str(v)).expanduser())
    if v := section.get("conf_file"):
        cc.conf_file = str(Path(str(v)).expanduser())
    return cc


def _service_config(section: dict, default: ServiceConfig, name: str) -> ServiceConfig:
    return ServiceConfig(
        enabled=_bool(section["enabled"], f"{name}.enabled") if "enabled" in section else default.enabled,
        unit=str(section.get("unit") or default.unit),
    )
