# src/pluginshell/core/cancellation.py
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class CancellationState:
    """
    Cooperative cancellation shared by every command a shell runs.

    Each interpreted line opens a scope. A single call to `signal_cancel()`
    (typically from the SIGINT handler) is observed by every open scope
    through `is_cancel_pending()` and stays pending until the outermost
    scope has closed. Nothing is ever interrupted: long-running loops poll
    the flag and return early.
    """

    def __init__(self) -> None:
        # Reentrant: the SIGINT handler runs on the main thread, possibly while it holds the lock
        self._lock = threading.RLock()
        self._cancel_requests = 0
        self._active_scopes = 0

    @property
    def active_scopes(self) -> int:
        with self._lock:
            return self._active_scopes

    @property
    def cancel_requests(self) -> int:
        with self._lock:
            return self._cancel_requests

    def signal_cancel(self) -> bool:
        """Requests cancellation of whatever is running. Safe from any thread and from signal handlers."""
        with self._lock:
            self._cancel_requests += 1
            requests = self._cancel_requests
        logger.debug("Cancel signaled. Nb cancel requests = %d", requests)
        return True

    def is_cancel_pending(self) -> bool:
        with self._lock:
            return self._cancel_requests > 0

    @contextmanager
    def scope(self) -> Iterator["CancellationState"]:
        """Opens a cancelable region; nesting is allowed."""
        with self._lock:
            if self._active_scopes == 0:
                # Requests signaled while nothing was running are stale.
                self._cancel_requests = 0
            self._active_scopes += 1
        try:
            yield self
        finally:
            with self._lock:
                aborted = self._cancel_requests > 0
                self._active_scopes -= 1
                if self._active_scopes == 0:
                    self._cancel_requests = 0
            if aborted:
                logger.warning("Command execution aborted!")

    enter_scope = scope

    def __repr__(self) -> str:
        return (
            f"<CancellationState requests={self._cancel_requests} "
            f"active_scopes={self._active_scopes}>"
        )
