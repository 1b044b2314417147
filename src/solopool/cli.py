"""CLI entry point for the solopool orchestrator."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from solopool.config import load_config
from solopool.errors import ConfigurationError, SolopoolError
from solopool.models.config import CoinId, OrchestratorConfig
from solopool.models.records import FleetReport
from solopool.orchestrator import FleetOrchestrator
from solopool.profiles import node_dir, rpc_port, stratum_port, stratum_unit, wallet_dir
from solopool.systemd.manager import SystemdServiceManager

log = logging.getLogger(__name__)


def _load(ctx: click.Context) -> OrchestratorConfig:
    """Load config or exit 1 before any service is touched."""
    try:
        cfg = load_config(ctx.obj["config_path"])
    except ConfigurationError as exc:
        click.echo(f"Error: failed to load configuration: {exc}", err=True)
        sys.exit(1)
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())
    return cfg


def _orchestrator(cfg: OrchestratorConfig) -> FleetOrchestrator:
    return FleetOrchestrator(cfg, SystemdServiceManager(use_sudo=cfg.use_sudo))


def _run(coro):
    """Run ``coro``, turning orchestrator errors into exit status 1."""
    try:
        return asyncio.run(coro)
    except SolopoolError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


class _CoinTagFilter(logging.Filter):
    """Pass only records whose message starts with one coin's ``[TAG]`` prefix."""

    def __init__(self, coin: CoinId) -> None:
        super().__init__()
        self._prefix = f"[{coin.tag}]"

    def filter(self, record: logging.LogRecord) -> bool:
        return record.getMessage().startswith(self._prefix)


def _attach_coin_logs(log_dir: str, coins: list[CoinId]) -> list[logging.Handler]:
    """Write each coin's startup lines to ``<log_dir>/<coin>.log``."""
    root = Path(log_dir).expanduser()
    root.mkdir(parents=True, exist_ok=True)
    pkg_log = logging.getLogger("solopool")
    handlers: list[logging.Handler] = []
    for coin in coins:
        handler = logging.FileHandler(root / f"{coin.value}.log")
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S",
        ))
        handler.addFilter(_CoinTagFilter(coin))
        pkg_log.addHandler(handler)
        handlers.append(handler)
    return handlers


def _detach(handlers: list[logging.Handler]) -> None:
    pkg_log = logging.getLogger("solopool")
    for handler in handlers:
        pkg_log.removeHandler(handler)
        handler.close()


def _finish(report: FleetReport) -> None:
    if not report.ok:
        if report.stop_error:
            click.echo(f"Error: stop failed before restart: {report.stop_error}", err=True)
        for r in report.failed:
            click.echo(f"[{r.coin.upper()}] FAILED: {r.error}", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """solopool - start and stop the solo mining pool stack."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Startup ────────────────────────────────────────────

LOG_DIR_OPTION = click.option(
    "--log-dir", default=None, type=click.Path(file_okay=False),
    help="Also write each coin's startup log to <dir>/<coin>.log",
)


@cli.command()
@click.option(
    "--coin", "coins", multiple=True,
    type=click.Choice([c.value for c in CoinId]),
    help="Only start this coin (repeatable)",
)
@LOG_DIR_OPTION
@click.pass_context
def start(ctx: click.Context, coins: tuple[str, ...], log_dir: str | None) -> None:
    """Start every enabled coin: nodes, sync, wallets, stratum."""
    cfg = _load(ctx)
    only = [CoinId(c) for c in coins] or None
    handlers = _attach_coin_logs(log_dir, only or cfg.enabled_coins()) if log_dir else []
    try:
        report = _run(_orchestrator(cfg).start_all(only))
    finally:
        _detach(handlers)
    _finish(report)


@cli.command("start-nodes")
@click.pass_context
def start_nodes(ctx: click.Context) -> None:
    """Request node and wallet services without waiting for sync."""
    cfg = _load(ctx)
    _run(_orchestrator(cfg).start_nodes())


@cli.command("start-pools")
@click.pass_context
def start_pools(ctx: click.Context) -> None:
    """Request stratum services, dashboard and payments without checks."""
    cfg = _load(ctx)
    _run(_orchestrator(cfg).start_pools())


@cli.command()
@LOG_DIR_OPTION
@click.pass_context
def restart(ctx: click.Context, log_dir: str | None) -> None:
    """Stop everything, then start everything."""
    cfg = _load(ctx)
    handlers = _attach_coin_logs(log_dir, cfg.enabled_coins()) if log_dir else []
    try:
        report = _run(_orchestrator(cfg).restart_all())
    finally:
        _detach(handlers)
    _finish(report)


# ── Shutdown ───────────────────────────────────────────


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop dashboard, payments, pools, wallets and nodes, in that order."""
    cfg = _load(ctx)
    _run(_orchestrator(cfg).stop_all())


@cli.command("stop-pools")
@click.pass_context
def stop_pools(ctx: click.Context) -> None:
    """Stop stratum services only."""
    cfg = _load(ctx)
    _run(_orchestrator(cfg).stop_pools())


@cli.command("stop-nodes")
@click.pass_context
def stop_nodes(ctx: click.Context) -> None:
    """Stop wallet services, then nodes."""
    cfg = _load(ctx)
    _run(_orchestrator(cfg).stop_nodes())


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the state of every managed service."""
    cfg = _load(ctx)
    states = _run(_orchestrator(cfg).service_status())
    if not states:
        click.echo("No services enabled.")
        return
    width = max(len(s.name) for s in states)
    for s in states:
        click.echo(f"  {s.name:<{width}}  {s.observed.value}")


@cli.command("sync-status")
@click.pass_context
def sync_status(ctx: click.Context) -> None:
    """Show one sync snapshot per enabled coin."""
    cfg = _load(ctx)
    snapshots = _run(_orchestrator(cfg).sync_status())
    if not snapshots:
        click.echo("No coins enabled.")
        return
    for coin, state in snapshots:
        click.echo(f"{coin.tag}:")
        if state is None:
            click.echo("  Not running or syncing")
            continue
        if state.target_height:
            click.echo(f"  Blocks: {state.height}, Headers: {state.target_height}")
        verdict = "synced" if state.synced else "syncing"
        click.echo(f"  Progress: {state.percent:.2f}% ({verdict}, {state.detail})")


@cli.command("show-config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective configuration."""
    cfg = _load(ctx)
    mode = cfg.merge_mining_mode.value if cfg.merge_mining_mode else "(disabled)"
    click.echo(f"Base dir:    {cfg.base_dir}")
    click.echo(f"Network:     {cfg.network.value}")
    click.echo(f"XMR/XTM:     {mode}")
    click.echo(f"Sudo:        {cfg.use_sudo}")
    click.echo(f"Dashboard:   {cfg.webui.unit if cfg.webui.enabled else '(disabled)'}")
    click.echo(f"Payments:    {cfg.payments.unit if cfg.needs_payments() else '(not needed)'}")
    click.echo("")
    for coin in CoinId:
        if not cfg.is_enabled(coin):
            click.echo(f"{coin.tag:<5} disabled")
            continue
        stratum = stratum_port(cfg, coin) if stratum_unit(coin, cfg.merge_mining_mode) else "via XTM"
        click.echo(
            f"{coin.tag:<5} rpc {rpc_port(cfg, coin)}  stratum {stratum}  "
            f"node {node_dir(cfg, coin)}  wallet {wallet_dir(cfg, coin)}"
        )
