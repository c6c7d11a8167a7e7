"""
Termination signal handling for the server.

SignalWaiter is an at-most-once wakeup: the server blocks on wait() and
resumes on the first signal received. Signals arriving after that are
ignored, since only one resume is needed.
"""

import queue
import signal
from typing import Dict, Iterable, Optional, Tuple


def shutdown_signals() -> Tuple[signal.Signals, ...]:
    """
    Signals that stop the server.

    SIGKILL cannot be caught, and SIGQUIT does not exist on Windows.
    """
    names = ("SIGINT", "SIGTERM", "SIGQUIT")
    return tuple(getattr(signal, name) for name in names if hasattr(signal, name))


class SignalWaiter:
    """Blocks until one of the given signals is delivered to the process."""

    def __init__(self, signals: Optional[Iterable[int]] = None):
        self.signals = tuple(signals) if signals is not None else shutdown_signals()
        # SimpleQueue.put is reentrant, so it is safe inside a signal handler
        self._queue: "queue.SimpleQueue[int]" = queue.SimpleQueue()
        self._previous: Dict[int, object] = {}

    def _handle(self, signum, frame) -> None:
        self._queue.put(signum)

    def install(self) -> None:
        """Install handlers for every signal (main thread only)."""
        for sig in self.signals:
            if sig in self._previous:
                continue
            self._previous[sig] = signal.signal(sig, self._handle)

    def restore(self) -> None:
        """Put back the handlers that were active before install()."""
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()

    def wait(self) -> int:
        """
        Block, without timeout, until a signal arrives.

        Returns:
            The number of the first signal received
        """
        self.install()
        try:
            return self._queue.get()
        finally:
            self.restore()
