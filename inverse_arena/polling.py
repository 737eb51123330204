"""
Periodic refresh of a read into a single-slot latest value.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, Set, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class PollStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class LatestValue(Generic[T]):
    """Most recent poll result. Overwritten, never queued."""
    data: Optional[T] = None
    status: PollStatus = PollStatus.IDLE
    error: Optional[BaseException] = None
    sequence: int = 0


class Poller(Generic[T]):
    """Issues the same read every ``interval_seconds`` and keeps only the newest result.

    Polls are started on schedule even if the previous one has not finished.
    A result only replaces the stored one if it was started later, so a slow
    old poll cannot overwrite a newer answer. ``stop()`` ends scheduling;
    polls already in flight are left to finish and their results are dropped.
    """

    def __init__(
        self,
        fetcher: Callable[[], Awaitable[T]],
        interval_seconds: float = 15.0,
        on_update: Optional[Callable[[LatestValue[T]], None]] = None,
    ):
        self.fetcher = fetcher
        self.interval_seconds = interval_seconds
        self.on_update = on_update
        self.latest: LatestValue[T] = LatestValue()
        self.running = False
        # Bumped by stop(); polls issued under an older token are dropped
        self._run_token = 0
        self._issued = 0
        self._loop_task: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        self.running = False
        self._run_token += 1
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

    async def __aenter__(self) -> "Poller[T]":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def _run(self) -> None:
        while self.running:
            task = asyncio.create_task(self.poll_once())
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            await asyncio.sleep(self.interval_seconds)

    async def poll_once(self) -> LatestValue[T]:
        """Issue one read and store its result if it is still the newest."""
        self._issued += 1
        sequence = self._issued
        run_token = self._run_token
        if self.latest.status is PollStatus.IDLE:
            self.latest.status = PollStatus.LOADING

        try:
            data = await self.fetcher()
        except Exception as e:
            logger.warning(f"Poll #{sequence} failed: {e}")
            self._store(
                LatestValue(data=self.latest.data, status=PollStatus.ERROR, error=e, sequence=sequence),
                run_token,
            )
        else:
            self._store(LatestValue(data=data, status=PollStatus.SUCCESS, sequence=sequence), run_token)
        return self.latest

    def _store(self, value: LatestValue[T], run_token: int) -> None:
        # A stop() after the poll was issued invalidates it, even if start() followed
        if run_token != self._run_token:
            logger.debug(f"Discarding poll #{value.sequence} result issued before stop")
            return
        if value.sequence < self.latest.sequence:
            logger.debug(f"Discarding stale poll #{value.sequence}")
            return
        self.latest = value
        if self.on_update:
            self.on_update(value)
