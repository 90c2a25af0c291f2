"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Test that FanOut waits for all tasks but reports the first failure.

"""
from graphbr.common.fanout import FanOut

import asyncio
import pytest

N = 5


class TaskError(Exception):
    pass


async def _task(index: int, *, fail: bool, delay: float = 0.0) -> int:
    await asyncio.sleep(delay)
    if fail:
        raise TaskError(index)
    return index


async def test_all_succeed_returns_results_in_order() -> None:
    group: FanOut[int] = FanOut("test")
    for i in range(N):
        # Later tasks finish first
        group.add(f"task-{i}", _task(i, fail=False, delay=0.001 * (N - i)))
    assert len(group) == N
    assert await group.wait() == list(range(N))


async def test_empty_group() -> None:
    assert await FanOut("test").wait() == []


@pytest.mark.parametrize("fail_at", range(N))
async def test_first_error_wins(fail_at: int) -> None:
    group: FanOut[int] = FanOut("test")
    for i in range(N):
        group.add(f"task-{i}", _task(i, fail=i == fail_at))
    with pytest.raises(TaskError) as excinfo:
        await group.wait()
    assert excinfo.value.args == (fail_at,)


async def test_earliest_failure_is_reported() -> None:
    group: FanOut[int] = FanOut("test")
    group.add("slow", _task(0, fail=True, delay=0.05))
    group.add("fast", _task(1, fail=True))
    with pytest.raises(TaskError) as excinfo:
        await group.wait()
    assert excinfo.value.args == (1,)


async def test_failure_does_not_wait_for_slow_tasks() -> None:
    never = asyncio.Event()
    group: FanOut[object] = FanOut("test")
    group.add("stuck", never.wait())
    group.add("failing", _task(1, fail=True))
    with pytest.raises(TaskError):
        await asyncio.wait_for(group.wait(), timeout=5)


async def test_remaining_tasks_keep_running_by_default() -> None:
    release = asyncio.Event()
    finished = []

    async def _slow() -> None:
        await release.wait()
        finished.append(True)

    group: FanOut[None] = FanOut("test")
    group.add("slow", _slow())
    group.add("failing", _task(1, fail=True))
    with pytest.raises(TaskError):
        await group.wait()
    release.set()
    await asyncio.sleep(0.01)
    assert finished == [True]


async def test_cancel_on_error() -> None:
    cancelled = []

    async def _slow() -> None:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    group: FanOut[None] = FanOut("test", cancel_on_error=True)
    group.add("slow", _slow())
    group.add("failing", _task(1, fail=True))
    with pytest.raises(TaskError):
        await group.wait()
    await asyncio.sleep(0.01)
    assert cancelled == [True]
