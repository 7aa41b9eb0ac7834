"""Task execution: issue once, classify, complete exactly once.

``TaskExecutor.start`` turns a ``RequestDescriptor`` into one in-flight task.
The transport's callback is classified and the resulting ``Result`` is handed
to the caller's completion on the executor's ``ExecutionContext``.

Guarantees per task:
- the transport is asked to issue the request once;
- the completion runs at most once, even if the transport calls back twice;
- the completion receives a ``Result``, never an exception.

There is no timeout, retry or cancellation here. A transport that never calls
back leaves its task ``ISSUED``.
"""

from __future__ import annotations

from enum import Enum
import itertools
import logging
import threading
from typing import TYPE_CHECKING, Any

from taskwire.classify import classify
from taskwire.context import ImmediateContext
from taskwire.decode import decode_json
from taskwire.errors import TransportClosedError
from taskwire.future import Future
from taskwire.reasons import TransportError
from taskwire.result import Failure

if TYPE_CHECKING:
    from collections.abc import Callable

    from taskwire.classify import RawOutcome
    from taskwire.context import ExecutionContext
    from taskwire.request import RequestDescriptor
    from taskwire.result import Result
    from taskwire.transport import Transport

log = logging.getLogger(__name__)

_task_ids = itertools.count(1)


class TaskState(str, Enum):
    CREATED = "created"
    ISSUED = "issued"
    COMPLETED = "completed"


class TaskHandle:
    """One in-flight request. Moves CREATED -> ISSUED -> COMPLETED, once."""

    def __init__(self, descriptor: RequestDescriptor) -> None:
        self.task_id: int = next(_task_ids)
        self.descriptor = descriptor
        self._state = TaskState.CREATED
        self._result: Result[bytes] | None = None
        self._lock = threading.Lock()
        self._done = threading.Event()

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def result(self) -> Result[bytes] | None:
        """The classified result once completed, else ``None``."""
        return self._result

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout_s: float | None = None) -> bool:
        """Block until the task has completed. Returns ``done``."""
        return self._done.wait(timeout_s)

    def _mark_issued(self) -> None:
        with self._lock:
            if self._state is TaskState.CREATED:
                self._state = TaskState.ISSUED

    def _complete(self, result: Result[bytes]) -> bool:
        """Record *result*; return False when the task had already completed."""
        with self._lock:
            if self._state is TaskState.COMPLETED:
                return False
            self._state = TaskState.COMPLETED
            self._result = result
        self._done.set()
        return True

    def __repr__(self) -> str:
        d = self.descriptor
        return f"TaskHandle(#{self.task_id} {d.method.value} {d.base_url}{d.path} {self._state.value})"


class TaskExecutor:
    """Issues descriptors through an explicitly owned transport.

    The executor owns *transport* for its lifetime and closes it exactly once
    in ``close()``.
    """

    def __init__(
        self,
        transport: Transport,
        context: ExecutionContext | None = None,
        *,
        encode_query: bool = False,
    ) -> None:
        self.transport = transport
        self.context: ExecutionContext = (
            context if context is not None else ImmediateContext()
        )
        self.encode_query = encode_query
        self._in_flight: set[TaskHandle] = set()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def in_flight(self) -> int:
        with self._lock:
            return len(self._in_flight)

    @property
    def closed(self) -> bool:
        return self._closed

    def start(
        self,
        descriptor: RequestDescriptor,
        on_complete: Callable[[Result[bytes]], None],
    ) -> TaskHandle:
        """Issue *descriptor* once and route its result to *on_complete*."""
        handle = TaskHandle(descriptor)
        with self._lock:
            self._in_flight.add(handle)

        def on_outcome(outcome: RawOutcome) -> None:
            self._finish(handle, classify(outcome), on_complete)

        handle._mark_issued()
        try:
            if self._closed:
                raise TransportClosedError(
                    "Cannot start a task on a closed executor",
                    hint="Create a new executor; close() is final.",
                )
            request = descriptor.build(encode_query=self.encode_query)
            log.debug("Issuing %r", handle)
            self.transport.issue(request, on_outcome)
        except Exception as exc:
            if handle.done:
                # The transport answered inline and the completion raised.
                log.exception("Completion for %r raised", handle)
                return handle
            log.debug("Issue failed for %r: %s", handle, exc)
            self._finish(handle, Failure(TransportError(exc)), on_complete)
        return handle

    def _finish(
        self,
        handle: TaskHandle,
        result: Result[bytes],
        on_complete: Callable[[Result[bytes]], None],
    ) -> None:
        if not handle._complete(result):
            log.debug("Dropping duplicate transport callback for %r", handle)
            return
        with self._lock:
            self._in_flight.discard(handle)
        log.debug("Completed %r", handle)
        self.context.dispatch(lambda: on_complete(result))

    # --- Future-returning helpers ---------------------------------------------

    def fetch(self, descriptor: RequestDescriptor) -> Future[bytes]:
        """Describe the request as a lazy ``Future``; each start issues a new task."""
        return Future(lambda done: self.start(descriptor, done))

    def fetch_json(self, descriptor: RequestDescriptor) -> Future[dict[str, Any]]:
        return self.fetch(descriptor).flat_map(decode_json)

    # --- Lifecycle ------------------------------------------------------------

    def close(self) -> None:
        """Invalidate the transport. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        log.debug("Closing transport %s", type(self.transport).__name__)
        self.transport.close()

    async def aclose(self) -> None:
        """Async variant of ``close`` for transports that expose ``aclose``."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        aclose = getattr(self.transport, "aclose", None)
        if callable(aclose):
            await aclose()
        else:
            self.transport.close()

    def __enter__(self) -> TaskExecutor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    async def __aenter__(self) -> TaskExecutor:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
