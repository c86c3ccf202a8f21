"""Cooperative cancellation for long-running installs."""

import threading

from ..errors import InstallCancelled


class CancellationToken:
    """Thread-safe flag checked at every await point of an install.

    ``cancel()`` may be called from any thread (a UI thread, a signal
    handler); the install notices it before starting the next transfer.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, what: str = "installation"):
        if self._event.is_set():
            raise InstallCancelled(what)
