"""Cancellation context threaded through every object store call."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from che_gateway_operator.integrations.kubernetes.exceptions import ReconcileCancelledError


@dataclass
class ReconcileContext:
    """Cancellation flag plus optional deadline for one reconciliation pass.

    The deadline is a ``time.monotonic()`` timestamp. Store implementations
    call :meth:`raise_if_cancelled` before each API call and use
    :meth:`remaining` as the request timeout.

    Example:
        >>> ctx = ReconcileContext.with_timeout(30)
        >>> reconciler.reconcile(key, ctx)
    """

    deadline: float | None = None
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)

    @classmethod
    def with_timeout(cls, seconds: float) -> ReconcileContext:
        """Create a context that expires ``seconds`` from now."""
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        """Cancel the reconciliation; safe to call from another thread."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """Whether the context was cancelled or its deadline has passed."""
        if self._cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left until the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def raise_if_cancelled(self) -> None:
        """Raise ReconcileCancelledError if the context is no longer live."""
        if self._cancelled.is_set():
            raise ReconcileCancelledError()
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise ReconcileCancelledError("Reconciliation deadline exceeded")
