"""
app/acquisition/cancellation.py

Cooperative cancellation for acquisition runs.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from app.acquisition.errors import RunCancelledError

Sleeper = Callable[[float], None]


class CancellationToken:
    """
    Thread-safe flag checked between attempts; waits wake up early on cancel.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = "Run cancelled."

    def cancel(self, reason: str | None = None) -> None:
        if reason:
            self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RunCancelledError(self._reason)

    def wait(self, seconds: float) -> None:
        """
        Block up to `seconds`; raise RunCancelledError if cancelled meanwhile.
        """

        if self._event.wait(timeout=max(0.0, seconds)):
            raise RunCancelledError(self._reason)


def pause(
    seconds: float,
    *,
    sleep: Sleeper | None = None,
    cancel_token: CancellationToken | None = None,
) -> None:
    """
    Wait between attempts.

    An injected `sleep` always wins (tests pass a recorder). Otherwise the
    wait goes through the token so cancellation interrupts it.
    """

    if cancel_token is not None:
        cancel_token.raise_if_cancelled()
    if seconds <= 0:
        return

    if sleep is not None:
        sleep(seconds)
    elif cancel_token is not None:
        cancel_token.wait(seconds)
    else:
        time.sleep(seconds)

    if cancel_token is not None:
        cancel_token.raise_if_cancelled()
