"""Suppression of duplicate notifications caused by webhook fan-out.

GitHub emits one ``review_requested`` delivery per requested reviewer, all
pointing at the same pull request URL. ``DuplicateSuppressor`` accepts the first
occurrence of a key and drops the rest until a caller supplied window has
elapsed. Entries are kept in an in-memory ledger which a background sweeper
trims once they are older than the retention horizon.
"""

import asyncio
from collections.abc import Callable
from datetime import timedelta

from reviewbot import clock

DEFAULT_RETENTION = 3 * 60 * 60
DEFAULT_SWEEP_INTERVAL = 3 * 60 * 60


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class SweeperHandle:
    def __init__(self, task: asyncio.Task) -> None:
        self._task = task

    @property
    def running(self) -> bool:
        return not self._task.done()

    def cancel(self) -> None:
        self._task.cancel()

    async def stop(self) -> None:
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            # only swallow the sweeper's own cancellation
            if asyncio.current_task().cancelling():
                raise


class DuplicateSuppressor:
    def __init__(
        self,
        retention: float | timedelta = DEFAULT_RETENTION,
        clock: Callable[[], float] = clock.monotonic,
    ) -> None:
        self.retention = _seconds(retention)
        self._clock = clock
        self._ledger: dict[str, float] = {}
        self._lock = asyncio.Lock()
        self._sweeper: SweeperHandle | None = None

    def __len__(self) -> int:
        return len(self._ledger)

    def __contains__(self, key: str) -> bool:
        return key in self._ledger

    async def should_notify(self, key: str, window: float | timedelta) -> bool:
        """Return True when ``key`` should be forwarded now.

        The window is measured from the last accepted occurrence; suppressed
        duplicates do not extend it.
        """
        window = _seconds(window)
        async with self._lock:
            now = self._clock()
            last_seen = self._ledger.get(key)
            if last_seen is not None and now - last_seen < window:
                return False
            self._ledger[key] = now
            return True

    async def sweep(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [
                key for key, seen in self._ledger.items() if now - seen > self.retention
            ]
            for key in expired:
                del self._ledger[key]
            return len(expired)

    def start(self, interval: float | timedelta = DEFAULT_SWEEP_INTERVAL) -> SweeperHandle:
        if self._sweeper is not None and self._sweeper.running:
            return self._sweeper
        task = asyncio.get_running_loop().create_task(self._run_sweeper(_seconds(interval)))
        self._sweeper = SweeperHandle(task)
        return self._sweeper

    async def _run_sweeper(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.sweep()
