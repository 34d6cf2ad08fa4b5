"""
In-flight request tracking.

Each logical query (collection + filter) runs as at most one asyncio task.
A caller asking for a query that is already running awaits the same task
instead of issuing a second request. Tasks can be cancelled individually or
all at once on shutdown.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InFlightRequests:
    """Single in-flight guard per query key."""

    def __init__(self) -> None:
        self._tasks: Dict[Hashable, asyncio.Task] = {}

    def __len__(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    def is_running(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run factory() under key, or join the task already running under it.

        A caller that is cancelled while waiting does not cancel the shared
        task; use cancel() for that.
        """
        task = self._tasks.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            logger.debug(f"Joining in-flight request {key!r}")
        return await asyncio.shield(task)

    def cancel(self, key: Hashable) -> bool:
        """Cancel the task running under key. Returns False if none was running."""
        task = self._tasks.get(key)
        if task is None or task.done():
            return False
        task.cancel()
        logger.info(f"Cancelled in-flight request {key!r}")
        return True

    def cancel_where(self, predicate: Callable[[Hashable], bool]) -> int:
        """Cancel every running task whose key satisfies predicate."""
        keys = [key for key in list(self._tasks) if predicate(key)]
        return sum(1 for key in keys if self.cancel(key))

    async def cancel_all(self) -> int:
        """Cancel every running task and wait for them to finish unwinding."""
        running = [task for task in self._tasks.values() if not task.done()]
        for task in running:
            task.cancel()
        if running:
            await asyncio.gather(*running, return_exceptions=True)
            logger.info(f"Cancelled {len(running)} in-flight request(s)")
        self._tasks.clear()
        return len(running)

    def _forget(self, key: Hashable, task: "asyncio.Task[Any]") -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        if not task.cancelled() and task.exception() is not None:
            # Retrieve the exception so asyncio doesn't warn when nobody awaited it
            logger.debug(f"In-flight request {key!r} failed: {task.exception()!r}")
