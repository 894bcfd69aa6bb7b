"""Periodic host alarm that drives device callbacks at the timer rate."""

from __future__ import annotations

import signal
import threading
from typing import Callable

TIMER_HZ = 60
MAX_HANDLER = 8

AlarmHandler = Callable[[], None]


class Alarm:
    """Calls its registered handlers, in order, every ``1 / hz`` seconds."""

    def __init__(self, hz: int = TIMER_HZ) -> None:
        self.hz = hz
        self._handlers: list[AlarmHandler] = []
        self._running = False
        self._previous_handler: object = None
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None

    @property
    def handlers(self) -> tuple[AlarmHandler, ...]:
        return tuple(self._handlers)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval(self) -> float:
        """Seconds between two alarms, at microsecond resolution."""
        return (1_000_000 // self.hz) / 1_000_000

    def add_handler(self, handler: AlarmHandler) -> None:
        """Register a handler; at most MAX_HANDLER may be registered."""
        if len(self._handlers) >= MAX_HANDLER:
            raise RuntimeError(f"at most {MAX_HANDLER} alarm handlers are allowed")
        self._handlers.append(handler)

    def fire(self) -> None:
        """Run every handler once, in registration order."""
        for handler in self._handlers:
            handler()

    def _on_signal(self, signum: int, frame: object) -> None:
        self.fire()

    def _use_signal(self) -> bool:
        return (
            hasattr(signal, "setitimer")
            and hasattr(signal, "SIGVTALRM")
            and threading.current_thread() is threading.main_thread()
        )

    def _thread_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            self.fire()

    def start(self) -> None:
        """Start the periodic alarm on virtual (CPU) time where the host allows it."""
        if self._running:
            return
        if self._use_signal():
            self._previous_handler = signal.signal(signal.SIGVTALRM, self._on_signal)
            signal.setitimer(signal.ITIMER_VIRTUAL, self.interval, self.interval)
        else:
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._thread_loop, args=(self._stop_event,), daemon=True
            )
            self._thread.start()
        self._running = True

    def stop(self) -> None:
        """Stop the periodic alarm; stopping an idle alarm does nothing."""
        if not self._running:
            return
        if self._thread is not None:
            assert self._stop_event is not None
            self._stop_event.set()
            self._thread.join()
            self._thread = None
            self._stop_event = None
        else:
            signal.setitimer(signal.ITIMER_VIRTUAL, 0, 0)
            signal.signal(signal.SIGVTALRM, self._previous_handler or signal.SIG_DFL)
            self._previous_handler = None
        self._running = False