"""Execution contexts: where completion callbacks run.

The executor hands every completion to exactly one context. Pick the one that
matches the caller's threading model:

- ``ImmediateContext`` runs the callback on whichever thread completed the task.
- ``EventLoopContext`` marshals onto an asyncio loop (the "main" context for
  async programs).
- ``QueueContext`` buffers callbacks until the owning thread drains them.
"""

from __future__ import annotations

import asyncio
from collections import deque
import logging
import threading
import time
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)


@runtime_checkable
class ExecutionContext(Protocol):
    """Anything that can run a zero-argument callable somewhere."""

    def dispatch(self, fn: Callable[[], None]) -> None:
        """Schedule *fn* to run on this context."""
        ...


class ImmediateContext:
    """Run callbacks inline on the calling thread."""

    def dispatch(self, fn: Callable[[], None]) -> None:
        fn()


class EventLoopContext:
    """Marshal callbacks onto an asyncio event loop.

    Safe to call from any thread. When *loop* is omitted the running loop at
    construction time is used.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def dispatch(self, fn: Callable[[], None]) -> None:
        self._loop.call_soon_threadsafe(fn)


class QueueContext:
    """FIFO of pending callbacks drained explicitly by the owning thread."""

    def __init__(self) -> None:
        self._pending: deque[Callable[[], None]] = deque()
        self._cond = threading.Condition()

    def dispatch(self, fn: Callable[[], None]) -> None:
        with self._cond:
            self._pending.append(fn)
            self._cond.notify_all()

    def __len__(self) -> int:
        with self._cond:
            return len(self._pending)

    def run_pending(self) -> int:
        """Run every callback queued so far; return how many ran."""
        ran = 0
        while True:
            with self._cond:
                if not self._pending:
                    return ran
                fn = self._pending.popleft()
            fn()
            ran += 1

    def run_until(
        self, predicate: Callable[[], bool], *, timeout_s: float | None = None
    ) -> bool:
        """Drain callbacks until *predicate* holds or *timeout_s* elapses.

        Returns the final value of *predicate*.
        """
        deadline = None if timeout_s is None else time.monotonic() + timeout_s
        while True:
            self.run_pending()
            if predicate():
                return True
            with self._cond:
                if self._pending:
                    continue
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    log.debug("QueueContext.run_until timed out")
                    return predicate()
                self._cond.wait(remaining)
