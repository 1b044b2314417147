"""systemctl adapter and ServiceHandle."""

from __future__ import annotations

import pytest

from solopool.errors import ServiceManagerError, ServiceNotFoundError, ServicePermissionError
from solopool.models.records import CommandResult, DesiredState, ObservedState
from solopool.systemd.handle import ServiceHandle
from solopool.systemd.manager import SystemdServiceManager

from tests.mocks import FakeRunner


def _result(rc: int, stdout: str = "", stderr: str = ""):
    return lambda argv: CommandResult(argv, rc, stdout, stderr)


async def test_start_uses_sudo_and_no_block():
    runner = FakeRunner()
    await SystemdServiceManager(runner=runner).start("node-btc-bitcoind")
    assert runner.calls == [["sudo", "-n", "systemctl", "start", "--no-block", "node-btc-bitcoind"]]


async def test_stop_without_sudo():
    runner = FakeRunner()
    await SystemdServiceManager(use_sudo=False, runner=runner).stop("pool-btc-ckpool")
    assert runner.calls == [["systemctl", "stop", "--no-block", "pool-btc-ckpool"]]


async def test_unknown_unit_is_not_found():
    runner = FakeRunner(_result(5, stderr="Failed to start nope.service: Unit nope.service not found."))
    with pytest.raises(ServiceNotFoundError) as exc_info:
        await SystemdServiceManager(runner=runner).start("nope")
    assert exc_info.value.unit == "nope"


async def test_sudo_password_required_is_permission_error():
    runner = FakeRunner(_result(1, stderr="sudo: a password is required"))
    with pytest.raises(ServicePermissionError):
        await SystemdServiceManager(runner=runner).start("node-btc-bitcoind")


async def test_polkit_denial_is_permission_error():
    runner = FakeRunner(_result(4, stderr="Failed to stop x.service: Access denied"))
    with pytest.raises(ServicePermissionError):
        await SystemdServiceManager(use_sudo=False, runner=runner).stop("x")


async def test_missing_systemctl_is_generic_error():
    runner = FakeRunner(_result(127, stderr="[Errno 2] No such file or directory: 'systemctl'"))
    with pytest.raises(ServiceManagerError) as exc_info:
        await SystemdServiceManager(use_sudo=False, runner=runner).start("x")
    assert not isinstance(exc_info.value, ServiceNotFoundError)


async def test_is_active_follows_exit_status():
    mgr = SystemdServiceManager(runner=FakeRunner(_result(0, "active\n")))
    assert await mgr.is_active("x")
    mgr = SystemdServiceManager(runner=FakeRunner(_result(3, "inactive\n")))
    assert not await mgr.is_active("x")


async def test_is_active_never_uses_sudo():
    runner = FakeRunner(_result(0, "active\n"))
    await SystemdServiceManager(runner=runner).is_active("wallet-xmr-rpc")
    assert runner.calls == [["systemctl", "is-active", "wallet-xmr-rpc"]]


@pytest.mark.parametrize(
    "rc,stdout,expected",
    [
        (0, "active\n", ObservedState.ACTIVE),
        (3, "inactive\n", ObservedState.INACTIVE),
        (3, "failed\n", ObservedState.FAILED),
        (3, "activating\n", ObservedState.ACTIVATING),
        (4, "", ObservedState.UNKNOWN),
    ],
)
async def test_observe(rc, stdout, expected):
    mgr = SystemdServiceManager(runner=FakeRunner(_result(rc, stdout)))
    assert await mgr.observe("x") == expected


async def test_handle_tracks_desired_state(manager):
    handle = ServiceHandle("pool-btc-ckpool", manager)
    assert handle.desired == DesiredState.STOPPED

    await handle.start()
    assert handle.desired == DesiredState.STARTING
    handle.mark_running()
    state = await handle.state()
    assert state.desired == DesiredState.RUNNING
    assert state.active

    await handle.stop()
    state = await handle.state()
    assert state.desired == DesiredState.STOPPED
    assert state.observed == ObservedState.INACTIVE


async def test_handle_requeries_every_time(manager):
    handle = ServiceHandle("wallet-xmr-rpc", manager)
    assert not await handle.is_active()
    manager.set_active("wallet-xmr-rpc")
    assert await handle.is_active()
    assert manager.calls.count(("is_active", "wallet-xmr-rpc")) == 2
