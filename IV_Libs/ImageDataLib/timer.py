"""
Elapsed-time utility used around decode and encode calls.

The timer may be shared between threads, so its state is guarded by a lock.
Resolution is whatever time.perf_counter() provides.
"""

import logging
import threading
import time

logger = logging.getLogger(__name__)


class Timer:
    """
    Measures elapsed wall-clock time. The timer starts on construction.

    Example:
        >>> t = Timer()
        >>> decode_something()
        >>> t.report("decode")
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._start = time.perf_counter()
        self._extra = 0.0

    def reset(self) -> None:
        """Restart the timer from zero. It keeps running."""
        with self._lock:
            self._extra = 0.0
            self._start = time.perf_counter()

    def elapsed(self) -> float:
        """Elapsed time in seconds, without stopping the timer."""
        with self._lock:
            return self._extra + (time.perf_counter() - self._start)

    def report(self, label: str = "elapsed") -> float:
        """
        Log the elapsed time at DEBUG level and return it.

        Time spent inside this call is not counted.

        Args:
            label: Text prefixed to the log message

        Returns:
            Elapsed time in seconds
        """
        with self._lock:
            self._extra += time.perf_counter() - self._start
            total = self._extra
            logger.debug(f"{label}: elapsed time={total:.6f} sec")
            self._start = time.perf_counter()
        return total
