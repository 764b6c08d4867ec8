# src/pluginshell/core/utils/perf_monitor.py
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class PerfMonitor:
    """
    Context manager logging how long its block took, at debug level.

        with PerfMonitor('Command "echo" execution time'):
            ...
    """

    def __init__(self, label: str, log: Optional[logging.Logger] = None):
        self.label = label
        self.log = log or logger
        self.elapsed_ms = 0.0
        self._start = 0.0

    def __enter__(self) -> "PerfMonitor":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000
        if self.log.isEnabledFor(logging.DEBUG):
            self.log.debug("%s: %.2f ms", self.label, self.elapsed_ms)
