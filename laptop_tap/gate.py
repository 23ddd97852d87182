from __future__ import annotations

import logging
import threading


class ActiveGate:
    """Two-state latch that pauses the polling loop while inactive.

    ``wait()`` returns immediately while active and blocks while inactive.
    Activating wakes every waiter once; cycles missed while paused are not
    replayed. ``close()`` releases current and future waiters permanently.
    """

    def __init__(self, active: bool = True) -> None:
        self._condition = threading.Condition()
        self._active = active
        self._closed = False
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def is_active(self) -> bool:
        with self._condition:
            return self._active

    def set_active(self, active: bool) -> None:
        with self._condition:
            if self._active == active:
                return
            self._active = active
            self.logger.info("Publishing %s.", "resumed" if active else "paused")
            if active:
                self._condition.notify_all()

    def toggle(self) -> bool:
        with self._condition:
            self.set_active(not self._active)
            return self._active

    def wait(self, timeout: float | None = None) -> bool:
        """Block until active (or closed). Returns whether the gate is active."""
        with self._condition:
            self._condition.wait_for(lambda: self._active or self._closed, timeout)
            return self._active

    def close(self) -> None:
        with self._condition:
            self._closed = True
            self._condition.notify_all()
