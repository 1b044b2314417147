"""Policy-driven polling helpers."""

from __future__ import annotations

import pytest

from solopool.errors import ProbeTimeoutError, ServiceNotFoundError
from solopool.models.policy import ExhaustionAction, RetryPolicy
from solopool.wait import poll_until, wait_until

from tests.mocks import FakeSleep


def _counter(results):
    calls = {"n": 0}

    async def fn():
        i = calls["n"]
        calls["n"] += 1
        r = results[min(i, len(results) - 1)]
        if isinstance(r, Exception):
            raise r
        return r

    return fn, calls


async def test_returns_on_first_success():
    fn, calls = _counter([True])
    sleep = FakeSleep()
    assert await wait_until(fn, RetryPolicy(5, 3), "x", sleep=sleep)
    assert calls["n"] == 1
    assert sleep.calls == []


async def test_degrade_returns_false_after_max_attempts():
    fn, calls = _counter([False])
    sleep = FakeSleep()
    assert not await wait_until(fn, RetryPolicy(5, 60), "x", sleep=sleep)
    assert calls["n"] == 60
    assert sleep.calls == [5] * 59


async def test_fail_policy_raises():
    fn, _ = _counter([False])
    policy = RetryPolicy(1, 2, on_exhaustion=ExhaustionAction.FAIL)
    with pytest.raises(ProbeTimeoutError):
        await wait_until(fn, policy, "x", sleep=FakeSleep())


async def test_unbounded_keeps_polling():
    fn, calls = _counter([False] * 500 + [True])
    sleep = FakeSleep()
    assert await wait_until(fn, RetryPolicy.forever(30), "x", sleep=sleep)
    assert calls["n"] == 501
    assert set(sleep.calls) == {30}


async def test_exceptions_count_as_failed_attempts(caplog):
    fn, calls = _counter([RuntimeError("boom"), True])
    assert await wait_until(fn, RetryPolicy(1, 3), "probe", sleep=FakeSleep())
    assert calls["n"] == 2
    assert "boom" in caplog.text


async def test_orchestrator_errors_propagate():
    fn, _ = _counter([ServiceNotFoundError("u", "gone")])
    with pytest.raises(ServiceNotFoundError):
        await wait_until(fn, RetryPolicy(1, 3), "x", sleep=FakeSleep())


async def test_poll_until_reports_each_value():
    fn, _ = _counter([1, 2, 3])
    seen = []
    value = await poll_until(
        fn, lambda v: v >= 3, RetryPolicy.forever(1), "x",
        sleep=FakeSleep(), on_value=lambda attempt, v: seen.append((attempt, v)),
    )
    assert value == 3
    assert seen == [(1, 1), (2, 2), (3, 3)]


def test_policy_allows():
    assert RetryPolicy(1, 2).allows(2)
    assert not RetryPolicy(1, 2).allows(3)
    assert RetryPolicy.forever(1).allows(10**9)
    assert RetryPolicy.forever(1).unbounded
