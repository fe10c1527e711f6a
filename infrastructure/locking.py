# ============================================================================
# SINGLE-FLIGHT LOCKING
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# STATUS: Infrastructure - Concurrency control
# PURPOSE: Coalesce concurrent identical async work per key
# CREATED: 19 OCT 2026
# ============================================================================
"""
Single-Flight Locking

Per-key coalescing of identical in-process work:
- The first caller for a key starts the work
- Concurrent callers for the same key await the same in-flight task
- Success is memoized; later callers get the cached result immediately
- Failure or cancellation clears the entry so the next call retries

Scope is one process and one event loop. Cross-process coordination
(migration races between processes) is out of scope.

Usage:
    from infrastructure.locking import SingleFlight

    tables = SingleFlight("table-setup")

    await tables.run("articles", lambda: create_table("articles"))
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)


class SingleFlight:
    """
    Memoized per-key async work with failure clearing.

    Callers are shielded from each other: cancelling one waiter does not
    cancel the shared task.
    """

    def __init__(self, name: str = "single-flight", memoize: bool = True):
        """
        Initialize single-flight group.

        Args:
            name: Label used in log messages
            memoize: Keep successful results. If False, an entry lives only
                while its task is in flight.
        """
        self.name = name
        self.memoize = memoize
        self._tasks: Dict[Hashable, asyncio.Task] = {}

    async def run(self, key: Hashable, work: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run `work` once per key, sharing the in-flight task.

        Args:
            key: Coalescing key (e.g. table name)
            work: Zero-arg coroutine factory, only called by the first caller

        Returns:
            Result of the shared task

        Raises:
            Whatever `work` raised; the key is cleared before waiters see it
        """
        task = self._tasks.get(key)
        if task is None:
            logger.debug(f"[{self.name}] starting work for {key!r}")
            task = asyncio.ensure_future(work())
            self._tasks[key] = task
            task.add_done_callback(lambda done, k=key: self._on_done(k, done))
        else:
            logger.debug(f"[{self.name}] joining in-flight work for {key!r}")

        return await asyncio.shield(task)

    def _on_done(self, key: Hashable, task: asyncio.Task) -> None:
        # Entry may already be replaced by forget() + a new run()
        if self._tasks.get(key) is not task:
            return
        if task.cancelled():
            logger.warning(f"[{self.name}] work for {key!r} cancelled, clearing entry")
            del self._tasks[key]
        elif task.exception() is not None:
            logger.warning(
                f"[{self.name}] work for {key!r} failed, clearing entry: {task.exception()}"
            )
            del self._tasks[key]
        elif not self.memoize:
            del self._tasks[key]

    def is_done(self, key: Hashable) -> bool:
        """Check if key has a memoized successful result."""
        task = self._tasks.get(key)
        return task is not None and task.done() and not task.cancelled() and task.exception() is None

    def in_flight(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    def result(self, key: Hashable) -> Optional[Any]:
        """Memoized result for key, or None."""
        if self.is_done(key):
            return self._tasks[key].result()
        return None

    def forget(self, key: Hashable) -> None:
        """Drop a memoized entry so the next run() repeats the work."""
        task = self._tasks.get(key)
        if task is not None and task.done():
            del self._tasks[key]

    def reset(self) -> None:
        """Drop every completed entry (in-flight work is left alone)."""
        for key in [k for k, t in self._tasks.items() if t.done()]:
            del self._tasks[key]

    def __len__(self) -> int:
        return len(self._tasks)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["SingleFlight"]
