"""
Cooperative cancellation for long-running file operations.

One CancellationToken is created per top-level command invocation and is
passed explicitly down every layer of the handler (directory walks, chunked
streams, hashing loops). Work checks the token at each iteration boundary
and raises OperationAborted once it has been aborted.
"""

import logging
import threading
from typing import Callable, List, Optional

from fmshell.core.errors import OperationAborted

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class CancellationToken:
    """Abort state of one in-flight operation"""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def abort(self) -> bool:
        """
        Mark the token aborted and notify listeners.

        Listeners run exactly once, on the first call. Later calls are
        no-ops.

        Returns:
            True if this call performed the abort
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            listeners = self._listeners
            self._listeners = []

        logger.debug("Cancellation token aborted (%d listener(s))", len(listeners))
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Cancellation listener failed")
        return True

    def add_listener(self, listener: Listener) -> Listener:
        """
        Register a callback to run when the token is aborted.

        If the token is already aborted the callback runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._listeners.append(listener)
                return listener
        listener()
        return listener

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def raise_if_aborted(self) -> None:
        if self.aborted:
            raise OperationAborted()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until aborted or timeout elapses; returns the aborted state"""
        return self._event.wait(timeout)


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise OperationAborted if a token was given and has been aborted"""
    if token is not None:
        token.raise_if_aborted()
