# mypy: ignore-errors
# tests/services/test_ticker.py
"""Tests for the cancellable repeating task."""

import asyncio

import pytest

from agent_desk.services.ticker import RepeatingTask


async def _wait_for_calls(calls, count, timeout=2.0) -> None:
    async def _poll():
        while len(calls) < count:
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.mark.asyncio
async def test_runs_sync_callback_repeatedly() -> None:
    calls = []
    task = RepeatingTask(0.01, lambda: calls.append(1), name="sync")
    task.start()
    try:
        await _wait_for_calls(calls, 3)
    finally:
        await task.stop()
    assert task.running is False


@pytest.mark.asyncio
async def test_runs_async_callback() -> None:
    calls = []

    async def callback():
        calls.append(1)

    task = RepeatingTask(0.01, callback, name="async")
    task.start()
    try:
        await _wait_for_calls(calls, 2)
    finally:
        await task.stop()


@pytest.mark.asyncio
async def test_stop_does_not_wait_out_the_interval() -> None:
    """Stopping a task with a long interval returns promptly and never fires."""
    calls = []
    task = RepeatingTask(60, lambda: calls.append(1))
    task.start()
    assert task.running is True

    await asyncio.wait_for(task.stop(), timeout=1.0)

    assert task.running is False
    assert calls == []


@pytest.mark.asyncio
async def test_failing_callback_is_logged_and_loop_continues(caplog) -> None:
    calls = []

    def callback():
        calls.append(1)
        raise ValueError("tick exploded")

    task = RepeatingTask(0.01, callback, name="flaky")
    task.start()
    try:
        await _wait_for_calls(calls, 2)
    finally:
        await task.stop()

    assert "flaky callback failed" in caplog.text


@pytest.mark.asyncio
async def test_start_twice_and_stop_twice_are_harmless() -> None:
    task = RepeatingTask(60, lambda: None)
    task.start()
    first = task._task
    task.start()
    assert task._task is first

    await task.stop()
    await task.stop()
    assert task.running is False


@pytest.mark.asyncio
async def test_stop_from_inside_callback() -> None:
    """A callback may stop its own task without deadlocking."""
    holder = {}
    calls = []

    async def callback():
        calls.append(1)
        await holder["task"].stop()

    holder["task"] = RepeatingTask(0.01, callback)
    holder["task"].start()
    await _wait_for_calls(calls, 1)
    await asyncio.sleep(0.05)

    assert calls == [1]
    assert holder["task"].running is False
