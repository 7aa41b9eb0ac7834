"""Lazy asynchronous results.

A ``Future`` describes work that will eventually produce a ``Result``. Nothing
happens until ``start`` is called, and every call to ``start`` runs the
operation again; transformations build new descriptions without running
anything.

    future = executor.fetch(descriptor).flat_map(decode_json)
    future.start(print)
    # or, from async code:
    result = await future.wait(timeout_s=5)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from taskwire.reasons import DecodeError, TransportError
from taskwire.result import Failure, Result, Success

if TYPE_CHECKING:
    from collections.abc import Callable

type Completion[T] = Callable[[Result[T]], None]


class Future[T]:
    """A restartable, lazily started producer of one ``Result`` per start."""

    __slots__ = ("_operation",)

    def __init__(self, operation: Callable[[Completion[T]], None]) -> None:
        self._operation = operation

    @classmethod
    def resolved(cls, result: Result[T]) -> Future[T]:
        """A future that completes immediately with *result*."""
        return cls(lambda completion: completion(result))

    def start(self, completion: Completion[T]) -> None:
        self._operation(completion)

    def map[U](self, f: Callable[[T], U]) -> Future[U]:
        return Future(lambda done: self.start(lambda r: done(r.map(f))))

    def flat_map[U](self, f: Callable[[T], Result[U]]) -> Future[U]:
        return Future(lambda done: self.start(lambda r: done(r.flat_map(f))))

    def then[U](self, f: Callable[[T], Future[U]]) -> Future[U]:
        """Chain a second asynchronous step that only runs on success."""

        def operation(done: Completion[U]) -> None:
            def on_first(result: Result[T]) -> None:
                match result:
                    case Success(value=value):
                        try:
                            nxt: Any = f(value)
                        except Exception as exc:
                            done(Failure(DecodeError(exc)))
                            return
                        nxt.start(done)
                    case Failure():
                        done(result)

            self.start(on_first)

        return Future(operation)

    async def wait(self, *, timeout_s: float | None = None) -> Result[T]:
        """Start the future and await its result on the running loop.

        A timeout yields ``Failure(TransportError(TimeoutError))``. It stops
        the wait only; the underlying request is left to finish on its own.
        """
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[Result[T]] = loop.create_future()

        def _set(result: Result[T]) -> None:
            if not waiter.done():
                waiter.set_result(result)

        def _complete(result: Result[T]) -> None:
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(_set, result)

        self.start(_complete)
        try:
            return await asyncio.wait_for(waiter, timeout_s)
        except TimeoutError:
            return Failure(
                TransportError(TimeoutError(f"no result within {timeout_s}s"))
            )
