"""Transports: the "issue a request, get bytes + status + error" capability.

The executor only depends on the ``Transport`` protocol. Two httpx-backed
implementations are provided:

- ``HttpxTransport`` sends each request with a blocking ``httpx.Client`` on a
  small worker pool it owns.
- ``AsyncHttpxTransport`` schedules one task per request on an asyncio loop
  using ``httpx.AsyncClient``.

Transports never raise for network problems. Whatever goes wrong while sending
is reported as ``RawOutcome(transport_error=exc)`` and left for ``classify``.
A transport is created once, shared by any number of tasks, and closed exactly
once by its owner.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from concurrent.futures import ThreadPoolExecutor
import logging
import threading
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from taskwire.classify import RawOutcome
from taskwire.config import ClientConfig
from taskwire.errors import TransportClosedError

if TYPE_CHECKING:
    from collections.abc import Callable

    from taskwire.request import PreparedRequest

log = logging.getLogger(__name__)

type TransportCallback = Callable[[RawOutcome], None]


@runtime_checkable
class Transport(Protocol):
    """Minimal transport protocol: issue and close."""

    def issue(self, request: PreparedRequest, callback: TransportCallback) -> None:
        """Send *request* and deliver its ``RawOutcome`` to *callback* later."""
        ...

    def close(self) -> None:
        """Release the underlying session. Called once by the owner."""
        ...


def outcome_from_response(response: httpx.Response) -> RawOutcome:
    return RawOutcome(data=response.content, status_code=response.status_code)


def _client_kwargs(config: ClientConfig) -> dict[str, Any]:
    return {
        "timeout": config.timeout_s,
        "verify": config.verify_tls,
        "follow_redirects": config.follow_redirects,
        "headers": {"User-Agent": config.user_agent},
    }


def _deliver(
    callback: TransportCallback, outcome: RawOutcome, request: PreparedRequest
) -> None:
    # A raising completion must not take the worker down with it.
    try:
        callback(outcome)
    except Exception:
        log.exception(
            "Transport callback raised for %s %s", request.method, request.url
        )


class HttpxTransport:
    """Blocking httpx client driven from a private worker pool.

    Pass *client* to reuse an existing ``httpx.Client`` (for example one built
    with ``httpx.MockTransport`` in tests). A client passed in is left open on
    ``close()``; one created here is closed.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(**_client_kwargs(self.config))
        self._pool = ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="taskwire"
        )
        self._lock = threading.Lock()
        self._closed = False
        self._worker = threading.local()

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, request: PreparedRequest) -> RawOutcome:
        """Send *request* synchronously and capture the outcome."""
        try:
            response = self._client.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.body,
            )
        except Exception as exc:
            log.debug("%s %s failed: %s", request.method, request.url, exc)
            return RawOutcome(transport_error=exc)
        return outcome_from_response(response)

    def issue(self, request: PreparedRequest, callback: TransportCallback) -> None:
        with self._lock:
            if self._closed:
                raise TransportClosedError(
                    "Cannot issue a request on a closed transport",
                    hint="Create a new transport; close() is final.",
                )
            self._pool.submit(self._run, request, callback)

    def _run(self, request: PreparedRequest, callback: TransportCallback) -> None:
        self._worker.active = True
        _deliver(callback, self.send(request), request)

    def close(self) -> None:
        """Let queued requests finish, then release the pool and client.

        Called from a completion running on one of the pool's own workers, it
        cannot join that worker, so the pool is shut down without waiting.
        Requests still queued then report a transport error from the closed
        client.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        on_worker = getattr(self._worker, "active", False)
        try:
            self._pool.shutdown(wait=not on_worker)
        finally:
            if self._owns_client:
                try:
                    self._client.close()
                except Exception as exc:
                    # Cleanup should never mask the primary failure.
                    log.warning("Transport cleanup failed: %s", exc)

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncHttpxTransport:
    """httpx.AsyncClient driven by tasks on an asyncio loop.

    ``issue`` may be called from the loop thread or, when *loop* is given,
    from any other thread. Use ``aclose()`` from async code to wait for
    outstanding requests before the client is closed.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(**_client_kwargs(self.config))
        self._loop = loop
        self._tasks: set[asyncio.Future[None] | concurrent.futures.Future[None]] = set()
        self._lock = threading.Lock()
        self._closed = False
        self._client_closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, request: PreparedRequest) -> RawOutcome:
        try:
            response = await self._client.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.body,
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.debug("%s %s failed: %s", request.method, request.url, exc)
            return RawOutcome(transport_error=exc)
        return outcome_from_response(response)

    async def _run(self, request: PreparedRequest, callback: TransportCallback) -> None:
        _deliver(callback, await self.send(request), request)

    def issue(self, request: PreparedRequest, callback: TransportCallback) -> None:
        with self._lock:
            if self._closed:
                raise TransportClosedError(
                    "Cannot issue a request on a closed transport",
                    hint="Create a new transport; close() is final.",
                )
        try:
            running: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        loop = self._loop or running
        if loop is None:
            raise RuntimeError(
                "AsyncHttpxTransport.issue() needs a running loop or an explicit loop="
            )

        fut: asyncio.Future[None] | concurrent.futures.Future[None]
        if loop is running:
            fut = loop.create_task(self._run(request, callback))
        else:
            fut = asyncio.run_coroutine_threadsafe(self._run(request, callback), loop)
        with self._lock:
            self._tasks.add(fut)
        fut.add_done_callback(self._forget)

    def _forget(self, fut: Any) -> None:
        with self._lock:
            self._tasks.discard(fut)

    def close(self) -> None:
        """Refuse new requests and schedule client teardown on the loop."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
        if loop is not None and not loop.is_closed():
            asyncio.run_coroutine_threadsafe(self._close_client(), loop)
        elif self._owns_client:
            log.warning(
                "No event loop to close the httpx.AsyncClient on; "
                "await aclose() instead of calling close()"
            )

    async def aclose(self) -> None:
        """Refuse new requests, wait for in-flight ones, then close the client."""
        with self._lock:
            self._closed = True
            pending = list(self._tasks)
        if pending:
            await _wait_all(pending)
        await self._close_client()

    async def _close_client(self) -> None:
        with self._lock:
            if self._client_closed or not self._owns_client:
                return
            self._client_closed = True
            pending = list(self._tasks)
        if pending:
            await _wait_all(pending)
        try:
            await self._client.aclose()
        except Exception as exc:
            log.warning("Transport cleanup failed: %s", exc)

    async def __aenter__(self) -> AsyncHttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


async def _wait_all(
    pending: list[asyncio.Future[None] | concurrent.futures.Future[None]],
) -> None:
    awaitables = [
        f if isinstance(f, asyncio.Future) else asyncio.wrap_future(f) for f in pending
    ]
    await asyncio.gather(*awaitables, return_exceptions=True)
