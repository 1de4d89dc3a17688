"""
Cancellation and deadline token passed along with every call.

A CallContext is shared between the caller and the dispatcher: the caller
may cancel it from another thread, and every blocking point in a call
(rate-limit wait, network I/O, retry backoff) checks or waits on it.
"""

import threading
import time
from collections.abc import Callable

from hubspot_sdk.core.errors import CancelledError, DeadlineExceededError


class CallContext:
    """
    Cancellation/deadline token for a single call or a group of calls.

    Example:
        ctx = CallContext.with_timeout(5.0)
        client.companies.get("123", ctx=ctx)

        # From another thread
        ctx.cancel()

        # Per-call child of a long-lived context, detached on exit
        with CallContext.with_timeout(5.0, parent=app_ctx) as call_ctx:
            client.deals.get("7", ctx=call_ctx)

    """

    def __init__(self, deadline: float | None = None, parent: "CallContext | None" = None):
        """
        Create a context.

        Args:
            deadline: Absolute deadline on the time.monotonic() clock
            parent: Context whose cancellation and deadline are inherited

        """
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline
        self.reason: str | None = None
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._unregister_parent: Callable[[], None] | None = None
        if parent is not None:
            self._unregister_parent = parent.on_cancel(lambda: self.cancel(parent.reason or "parent context canceled"))

    @classmethod
    def background(cls) -> "CallContext":
        """A context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float, parent: "CallContext | None" = None) -> "CallContext":
        """A context whose deadline is `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds, parent=parent)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called on this context or its parent."""
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        """True once the deadline has passed."""
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_done(self) -> None:
        """Raise CancelledError or DeadlineExceededError if the context is done."""
        if self.cancelled:
            raise CancelledError(self.reason or "context canceled")
        if self.expired:
            self.close()
            raise DeadlineExceededError("context deadline exceeded")

    # =========================================================================
    # Cancellation
    # =========================================================================

    def cancel(self, reason: str = "context canceled") -> None:
        """Cancel the context and run registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        self.close()
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback to run when the context is cancelled.

        Runs immediately if the context is already cancelled.

        Returns:
            A function that unregisters the callback

        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                registered = True
            else:
                registered = False
        if not registered:
            callback()

        def unregister() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unregister

    def close(self) -> None:
        """
        Detach from the parent context.

        Runs on its own once the context is cancelled or found expired, and
        on leaving a `with` block. Idempotent.
        """
        with self._lock:
            unregister, self._unregister_parent = self._unregister_parent, None
        if unregister is not None:
            unregister()

    def __enter__(self) -> "CallContext":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    # =========================================================================
    # Waiting
    # =========================================================================

    def wait(self, seconds: float) -> bool:
        """
        Sleep up to `seconds`, returning early on cancellation or deadline.

        Returns:
            True if the context is done when the wait ends

        """
        timeout = max(0.0, seconds)
        remaining = self.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)
        self._event.wait(timeout)
        if self.done:
            self.close()
            return True
        return False

    def sleep(self, seconds: float) -> None:
        """Interruptible sleep that raises once the context is done."""
        self.wait(seconds)
        self.raise_if_done()

    def __repr__(self) -> str:
        return f"CallContext(cancelled={self.cancelled}, remaining={self.remaining()})"
