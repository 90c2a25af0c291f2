"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Concurrent fan-out of per-host work with first-error-wins semantics.

"""
from collections.abc import Coroutine
from typing import Any, Generic, TypeVar

import asyncio
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FanOut(Generic[T]):
    """Group of concurrently running tasks.

    Tasks start as soon as they are added; there is no concurrency
    limit as the number of tasks is bounded by the number of hosts.

    `wait` waits for all of them, but the first failure ends the wait
    and is raised as-is. The remaining tasks are left running unless
    `cancel_on_error` is set; their outcome is only logged.
    """

    def __init__(self, name: str, *, cancel_on_error: bool = False) -> None:
        self.name = name
        self.cancel_on_error = cancel_on_error
        self._tasks: list[asyncio.Task[T]] = []

    def __len__(self) -> int:
        return len(self._tasks)

    def add(self, name: str, coro: Coroutine[Any, Any, T]) -> None:
        self._tasks.append(asyncio.create_task(coro, name=f"{self.name}/{name}"))

    async def wait(self) -> list[T]:
        pending: set[asyncio.Task[T]] = set(self._tasks)
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
            # Several tasks may have failed in the same round; report the earliest added one
            failed = [task for task in self._tasks if task in done and (task.cancelled() or task.exception())]
            if failed:
                first = failed[0]
                self._abandon(pending)
                error = first.exception() if not first.cancelled() else asyncio.CancelledError(first.get_name())
                logger.error("%s: %s failed: %r (%d tasks still running)", self.name, first.get_name(), error, len(pending))
                assert error is not None
                raise error
        logger.info("%s: all %d tasks succeeded", self.name, len(self._tasks))
        return [task.result() for task in self._tasks]

    def _abandon(self, pending: set[asyncio.Task[T]]) -> None:
        for task in pending:
            if self.cancel_on_error:
                task.cancel()
            task.add_done_callback(_log_abandoned_task)


def _log_abandoned_task(task: asyncio.Task) -> None:
    if task.cancelled():
        logger.info("%s cancelled after group failure", task.get_name())
        return
    exception = task.exception()
    if exception is not None:
        logger.warning("%s also failed after group failure: %r", task.get_name(), exception)
    else:
        logger.info("%s finished after group failure", task.get_name())
