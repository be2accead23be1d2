"""SessionScheduler implementation."""

import asyncio
from typing import Protocol

from ..config import DEFAULT_CHAT_INTERVAL
from ..logging_config import get_account_logger
from ..models import TickResult
from ..session import IAccountSession


class ISessionScheduler(Protocol):
    """Drives one AccountSession on a fixed interval."""

    async def start(self) -> None:
        """Initialize the session and begin ticking in a background task."""
        ...

    async def stop(self) -> None:
        """Stop ticking."""
        ...


class SessionScheduler:
    """One background task per account: initialize, then tick every interval.

    Ticks are awaited inline, so at most one tick of a session is in flight.
    Exceptions from a tick are logged and never leave the task.
    """

    def __init__(
        self,
        session: IAccountSession,
        interval: float = DEFAULT_CHAT_INTERVAL,
        stop_timeout: float = 5.0,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")

        self._session = session
        self._interval = interval
        self._stop_timeout = stop_timeout
        self._logger = get_account_logger(__name__, session.label)

        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None
        self._tick_count = 0
        self._last_result: TickResult | None = None

    @property
    def session(self) -> IAccountSession:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def last_result(self) -> TickResult | None:
        return self._last_result

    async def start(self) -> None:
        """Start the background task."""
        if self.is_running:
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self._run(), name=f"scheduler:{self._session.label}"
        )

    async def stop(self) -> None:
        """Ask the task to finish, cancelling it if it does not within stop_timeout."""
        if not self._task:
            return

        if self._stop_event:
            self._stop_event.set()

        try:
            await asyncio.wait_for(asyncio.shield(self._task), self._stop_timeout)
        except asyncio.TimeoutError:
            self._logger.warning("Tick still running after stop, cancelling")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        self._task = None

    async def run_tick(self) -> TickResult | None:
        """Run one tick, containing any error it raises."""
        self._tick_count += 1
        try:
            result = await self._session.tick()
        except Exception:
            self._logger.exception("Tick %s failed", self._tick_count)
            result = None

        self._last_result = result
        return result

    async def _run(self) -> None:
        try:
            await self._session.initialize()
        except Exception:
            self._logger.exception("Session initialization failed")

        loop = asyncio.get_running_loop()
        next_run = loop.time() + self._interval

        while not self._stop_requested():
            if await self._wait_for_stop(next_run - loop.time()):
                break

            await self.run_tick()

            # Overrunning ticks push the schedule back instead of piling up
            next_run = max(next_run + self._interval, loop.time())

        self._logger.info("Scheduler stopped after %s ticks", self._tick_count)

    def _stop_requested(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    async def _wait_for_stop(self, delay: float) -> bool:
        """Sleep for delay seconds. Return True if stop was requested meanwhile."""
        if self._stop_event is None:
            await asyncio.sleep(max(0.0, delay))
            return False
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(0.0, delay))
            return True
        except asyncio.TimeoutError:
            return False
