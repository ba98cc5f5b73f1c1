"""Pomodoro timer state machine.

The machine owns the current mode, the remaining seconds and the running
flag of one user's focus timer. It contains no clock of its own: an external
source calls ``tick()`` once per second while the timer runs. Run
boundaries (start, expiry, skip, reset) are reported to a ``SessionRecorder``
after the local transition has been applied, so a failing or slow recorder
never changes what the timer does.
"""

import threading
from concurrent.futures import Executor
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, UTC
from enum import Enum
from typing import Callable, Iterable, List, Optional, Protocol

from focusflow.core.logging_config import get_logger

logger = get_logger(__name__)


class TimerMode(str, Enum):
    """Phase of a pomodoro cycle."""

    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self is not TimerMode.WORK


class TimerState(str, Enum):
    """Whether the current phase is counting down."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class ConfigurationError(ValueError):
    """Raised when a timer configuration violates its constraints."""


class InvalidTransitionError(Exception):
    """Raised when an operation is not valid from the current state."""


class RecorderError(Exception):
    """Raised by a session recorder when a session cannot be written."""


def _require_int(name: str, value, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"{name} must be an integer, got {type(value).__name__}"
        )
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")


@dataclass(frozen=True)
class TimerConfig:
    """Durations and auto-chain flags read at the start of a run."""

    work_duration_seconds: int = 1500
    short_break_duration_seconds: int = 300
    long_break_duration_seconds: int = 900
    pomodoros_before_long_break: int = 4
    auto_start_breaks: bool = False
    auto_start_pomodoros: bool = False

    def __post_init__(self):
        _require_int("work_duration_seconds", self.work_duration_seconds, 1)
        _require_int(
            "short_break_duration_seconds", self.short_break_duration_seconds, 1
        )
        _require_int("long_break_duration_seconds", self.long_break_duration_seconds, 1)
        _require_int("pomodoros_before_long_break", self.pomodoros_before_long_break, 1)
        for name in ("auto_start_breaks", "auto_start_pomodoros"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a boolean")

    def duration_for(self, mode: TimerMode) -> int:
        if mode is TimerMode.SHORT_BREAK:
            return self.short_break_duration_seconds
        if mode is TimerMode.LONG_BREAK:
            return self.long_break_duration_seconds
        return self.work_duration_seconds


@dataclass(frozen=True)
class TimerSnapshot:
    """Read-only view of a timer, handed to observers and API responses."""

    state: TimerState
    mode: TimerMode
    remaining_seconds: int
    duration_seconds: int
    completed_work_count: int
    task_id: Optional[int] = None
    started_at: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self.state is TimerState.RUNNING


@dataclass(frozen=True)
class RecorderWarning:
    """A session recorder call that failed without affecting the timer."""

    operation: str
    message: str
    occurred_at: datetime


class SessionRecorder(Protocol):
    def start_session(
        self,
        task_id: Optional[int],
        started_at: datetime,
        mode: TimerMode,
        planned_duration_seconds: int,
    ) -> int: ...

    def stop_session(
        self,
        session_id: int,
        ended_at: datetime,
        duration_seconds: int,
        *,
        is_break: bool,
        skipped: bool,
    ) -> None: ...


class SettingsProvider(Protocol):
    def get_config(self, user_id: int) -> TimerConfig: ...


class _SessionHandle:
    """Recorder session id, filled in once ``start_session`` has run."""

    __slots__ = ("session_id",)

    def __init__(self):
        self.session_id: Optional[int] = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


_ACTIVE_STATES = (TimerState.RUNNING, TimerState.PAUSED)


class TimerMachine:
    """Single-user pomodoro timer.

    All operations are serialised by an internal lock. Operations that are
    not valid from the current state raise ``InvalidTransitionError`` and
    leave the timer untouched; ``tick()`` is the exception and simply
    returns ``False`` when there is nothing to count down, so stale or
    duplicate clock callbacks are harmless.

    When an ``executor`` is given, recorder calls are queued to it in the
    order the transitions happened; otherwise they run inline. An operation
    invoked from an inline recorder call raises ``InvalidTransitionError``.
    Observers are notified once the lock is released and may call any
    operation.
    """

    def __init__(
        self,
        config: TimerConfig,
        recorder: Optional[SessionRecorder] = None,
        *,
        executor: Optional[Executor] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._config = config
        self._recorder = recorder
        self._executor = executor
        self._clock = clock or _utcnow

        self._lock = threading.RLock()
        self._in_transition = False
        self._pending: List[tuple[str, Callable[[], None]]] = []
        self._observers: List[Callable[[TimerSnapshot], None]] = []
        self._warnings: List[RecorderWarning] = []
        self._warnings_lock = threading.Lock()

        self._state = TimerState.IDLE
        self._mode = TimerMode.WORK
        self._duration = config.work_duration_seconds
        self._remaining = self._duration
        self._elapsed = 0
        self._completed_work_count = 0
        self._task_id: Optional[int] = None
        self._started_at: Optional[datetime] = None
        self._session: Optional[_SessionHandle] = None

    # -- accessors -----------------------------------------------------------

    @property
    def config(self) -> TimerConfig:
        return self._config

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def mode(self) -> TimerMode:
        return self._mode

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._state is TimerState.RUNNING

    @property
    def completed_work_count(self) -> int:
        return self._completed_work_count

    @property
    def task_id(self) -> Optional[int]:
        return self._task_id

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def subscribe(self, callback: Callable[[TimerSnapshot], None]) -> Callable[[], None]:
        """Call *callback* with a fresh snapshot after every change.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._observers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._observers:
                    self._observers.remove(callback)

        return unsubscribe

    def drain_warnings(self) -> List[RecorderWarning]:
        """Return and clear the recorder failures collected so far."""
        with self._warnings_lock:
            warnings, self._warnings = self._warnings, []
        return warnings

    # -- operations ----------------------------------------------------------

    def start(self, task_id: Optional[int] = None) -> TimerSnapshot:
        """Start a new phase or resume a paused one."""
        with self._transition("start", (TimerState.IDLE, TimerState.PAUSED)):
            if (
                self._session is not None
                and task_id is not None
                and task_id != self._task_id
            ):
                raise InvalidTransitionError(
                    "start() cannot switch tasks while a run is in progress; "
                    "reset the timer first"
                )
            if task_id is not None:
                self._task_id = task_id
            self._state = TimerState.RUNNING
            if self._session is None:
                self._open_session()
        return self.snapshot()

    def pause(self) -> TimerSnapshot:
        with self._transition("pause", (TimerState.RUNNING,)):
            self._state = TimerState.PAUSED
        return self.snapshot()

    def tick(self) -> bool:
        """Advance the countdown by one second.

        Returns ``True`` when a second was consumed. A tick that arrives
        while the timer is not running, or while another transition is
        still being applied, is ignored.
        """
        with self._lock:
            if (
                self._in_transition
                or self._state is not TimerState.RUNNING
                or self._remaining <= 0
            ):
                return False
            self._in_transition = True
            try:
                self._remaining -= 1
                self._elapsed += 1
                if self._remaining == 0:
                    self._finish_phase()
                self._flush_recorder_calls()
            finally:
                self._in_transition = False
            snapshot = self._snapshot_locked()
        self._notify(snapshot)
        return True

    def complete(self) -> TimerSnapshot:
        """Finish the current phase early, with completion credit."""
        with self._transition("complete", _ACTIVE_STATES):
            self._finish_phase()
        return self.snapshot()

    def skip(self) -> TimerSnapshot:
        """Move to the next phase without completion credit.

        The next mode is the one expiry would have chosen for the current
        count; the new phase waits for ``start()``.
        """
        with self._transition("skip", _ACTIVE_STATES):
            skipped = self._mode
            self._close_session(skipped=True)
            if skipped is TimerMode.WORK:
                next_mode = self._break_after(self._completed_work_count + 1)
            else:
                next_mode = TimerMode.WORK
            self._enter(next_mode)
            self._state = TimerState.PAUSED
            logger.info(
                "timer_phase_skipped",
                skipped=skipped.value,
                next_mode=next_mode.value,
                completed_work_count=self._completed_work_count,
            )
        return self.snapshot()

    def reset(self) -> TimerSnapshot:
        """Discard the current run and return to an idle work phase."""
        with self._transition("reset", None):
            self._close_session(skipped=True)
            self._enter(TimerMode.WORK)
            self._state = TimerState.IDLE
            self._task_id = None
        return self.snapshot()

    def start_break(self, is_long: bool = False) -> TimerSnapshot:
        with self._transition("start_break", (TimerState.IDLE, TimerState.PAUSED)):
            if self._mode is not TimerMode.WORK:
                raise InvalidTransitionError(
                    f"start_break() is not valid during a {self._mode.value} phase"
                )
            self._close_session(skipped=True)
            self._enter(TimerMode.LONG_BREAK if is_long else TimerMode.SHORT_BREAK)
            self._state = TimerState.RUNNING
            self._open_session()
        return self.snapshot()

    def prime(self, duration_seconds: int) -> TimerSnapshot:
        """Override the length of the next work run while idle."""
        _require_int("duration_seconds", duration_seconds, 1)
        with self._transition("prime", (TimerState.IDLE,)):
            self._duration = duration_seconds
            self._remaining = duration_seconds
        return self.snapshot()

    def update_config(self, config: TimerConfig) -> TimerSnapshot:
        """Use *config* for future phases.

        Only an idle timer picks up the new work duration immediately; a run
        in progress keeps its remaining time.
        """
        with self._transition("update_config", None):
            self._config = config
            if self._state is TimerState.IDLE:
                self._enter(TimerMode.WORK)
        return self.snapshot()

    # -- internals -----------------------------------------------------------

    @contextmanager
    def _transition(self, operation: str, valid: Optional[Iterable[TimerState]]):
        with self._lock:
            if self._in_transition:
                raise InvalidTransitionError(
                    f"{operation}() called while another transition is being applied"
                )
            if valid is not None and self._state not in valid:
                raise InvalidTransitionError(
                    f"{operation}() is not valid from {self._state.value} state"
                )
            self._in_transition = True
            try:
                yield
                self._flush_recorder_calls()
            finally:
                self._pending.clear()
                self._in_transition = False
            snapshot = self._snapshot_locked()
        self._notify(snapshot)

    def _finish_phase(self) -> None:
        finished = self._mode
        self._close_session(skipped=False)
        if finished is TimerMode.WORK:
            self._completed_work_count += 1
            next_mode = self._break_after(self._completed_work_count)
            auto_start = self._config.auto_start_breaks
        else:
            next_mode = TimerMode.WORK
            auto_start = self._config.auto_start_pomodoros
        self._enter(next_mode)
        if auto_start:
            self._state = TimerState.RUNNING
            self._open_session()
        else:
            self._state = TimerState.PAUSED
        logger.info(
            "timer_phase_finished",
            finished=finished.value,
            next_mode=next_mode.value,
            running=auto_start,
            completed_work_count=self._completed_work_count,
        )

    def _break_after(self, work_count: int) -> TimerMode:
        if work_count % self._config.pomodoros_before_long_break == 0:
            return TimerMode.LONG_BREAK
        return TimerMode.SHORT_BREAK

    def _enter(self, mode: TimerMode) -> None:
        self._mode = mode
        if mode is TimerMode.LONG_BREAK:
            self._completed_work_count = 0
        self._duration = self._config.duration_for(mode)
        self._remaining = self._duration
        self._elapsed = 0

    def _open_session(self) -> None:
        handle = _SessionHandle()
        self._session = handle
        self._started_at = self._clock()
        self._elapsed = 0
        if self._recorder is None:
            return
        recorder = self._recorder
        task_id, started_at, mode = self._task_id, self._started_at, self._mode
        planned = self._duration

        def call() -> None:
            handle.session_id = recorder.start_session(
                task_id, started_at, mode, planned
            )

        self._pending.append(("start_session", call))

    def _close_session(self, skipped: bool) -> None:
        handle = self._session
        if handle is None:
            return
        self._session = None
        self._started_at = None
        if self._recorder is None:
            return
        recorder = self._recorder
        ended_at = self._clock()
        duration = self._elapsed
        is_break = self._mode.is_break

        def call() -> None:
            if handle.session_id is None:
                raise RecorderError("session start was never recorded")
            recorder.stop_session(
                handle.session_id,
                ended_at,
                duration,
                is_break=is_break,
                skipped=skipped,
            )

        self._pending.append(("stop_session", call))

    def _flush_recorder_calls(self) -> None:
        pending, self._pending = self._pending, []
        for operation, call in pending:
            if self._executor is not None:
                self._executor.submit(self._run_recorder_call, operation, call)
            else:
                self._run_recorder_call(operation, call)

    def _run_recorder_call(self, operation: str, call: Callable[[], None]) -> None:
        try:
            call()
        except Exception as exc:  # recorder failures never undo a transition
            logger.warning(
                "timer_recorder_failed", operation=operation, error=str(exc)
            )
            with self._warnings_lock:
                self._warnings.append(
                    RecorderWarning(
                        operation=operation, message=str(exc), occurred_at=_utcnow()
                    )
                )

    def _snapshot_locked(self) -> TimerSnapshot:
        return TimerSnapshot(
            state=self._state,
            mode=self._mode,
            remaining_seconds=self._remaining,
            duration_seconds=self._duration,
            completed_work_count=self._completed_work_count,
            task_id=self._task_id,
            started_at=self._started_at,
        )

    def _notify(self, snapshot: TimerSnapshot) -> None:
        with self._lock:
            observers = list(self._observers)
        for callback in observers:
            callback(snapshot)
