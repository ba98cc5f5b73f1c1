"""One focus timer per user, and the clock that drives them."""

import asyncio
import threading
from concurrent.futures import Executor
from typing import Callable, Dict, List, Optional
from fastapi import Request
from focusflow.core.logging_config import get_logger
from focusflow.core.timer import (
    SessionRecorder,
    SettingsProvider,
    TimerMachine,
    TimerSnapshot,
)

logger = get_logger(__name__)

RecorderFactory = Callable[[int], Optional[SessionRecorder]]


class TimerRegistry:
    """Owns the ``TimerMachine`` of every user seen since startup.

    Machines are created lazily with the user's current configuration and
    live until the process exits; nothing is resumed across restarts.
    """

    def __init__(
        self,
        settings_provider: SettingsProvider,
        recorder_factory: RecorderFactory,
        executor: Optional[Executor] = None,
    ):
        self._settings_provider = settings_provider
        self._recorder_factory = recorder_factory
        self._executor = executor
        self._machines: Dict[int, TimerMachine] = {}
        self._lock = threading.Lock()

    def get(self, user_id: int) -> TimerMachine:
        """Return the user's machine, creating it on first use.

        Raises ``ConfigurationError`` when the user's settings are invalid.
        """
        with self._lock:
            machine = self._machines.get(user_id)
            if machine is None:
                machine = TimerMachine(
                    self._settings_provider.get_config(user_id),
                    self._recorder_factory(user_id),
                    executor=self._executor,
                )
                self._machines[user_id] = machine
                logger.info("timer_created", user_id=user_id)
            return machine

    def refresh_config(self, user_id: int) -> Optional[TimerSnapshot]:
        """Push the user's current settings to an existing machine."""
        with self._lock:
            machine = self._machines.get(user_id)
        if machine is None:
            return None
        return machine.update_config(self._settings_provider.get_config(user_id))

    def running(self) -> List[TimerMachine]:
        with self._lock:
            machines = list(self._machines.values())
        return [machine for machine in machines if machine.is_running]

    def tick_all(self) -> int:
        """Deliver one tick to every running machine; returns how many moved."""
        return sum(1 for machine in self.running() if machine.tick())


class TimerTicker:
    """Asyncio task that calls ``TimerRegistry.tick_all`` once per second."""

    def __init__(self, registry: TimerRegistry, interval: float = 1.0):
        self._registry = registry
        self._interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("timer_ticker_started", interval=self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("timer_ticker_stopped")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(next_tick - loop.time(), 0))
            next_tick += self._interval
            try:
                # Recorder calls may run inline, keep them off the event loop
                await asyncio.to_thread(self._registry.tick_all)
            except Exception:
                logger.exception("timer_tick_failed")


def get_timer_registry(request: Request) -> TimerRegistry:
    """FastAPI dependency returning the registry created at startup."""
    return request.app.state.timer_registry
