from __future__ import annotations
import threading
import time
from typing import Callable

from .config import DEFAULT_EMIT_INTERVAL

Clock = Callable[[], float]


class EmitThrottle:
    """Lets at most one emission through per ``interval`` seconds.

    The elapsed-time check, the send and the timestamp update run under one
    lock, so two completions racing for the same slot never both emit.
    """

    def __init__(self, interval: float = DEFAULT_EMIT_INTERVAL, clock: Clock = time.monotonic):
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.interval = float(interval)
        self._clock = clock
        self._lock = threading.Lock()
        self._last_emit = clock()

    @property
    def last_emit(self) -> float:
        return self._last_emit

    def ready(self) -> bool:
        with self._lock:
            return self._clock() - self._last_emit >= self.interval

    def try_emit(self, send: Callable[[], None]) -> bool:
        with self._lock:
            now = self._clock()
            if now - self._last_emit < self.interval:
                return False
            send()
            self._last_emit = now
            return True
