from __future__ import annotations

import threading


class CancelToken:
    """Cancellation signal shared between a caller and a running call.

    Any thread (or a signal handler) may call cancel(); the transport checks
    the token between attempts and response chunks and waits on it while
    backing off.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; True if cancelled meanwhile."""
        return self._event.wait(max(0.0, timeout))
