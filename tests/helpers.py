"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off transports and recorders as coverage expands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import TYPE_CHECKING, Any

import httpx

from tests.conftest import FakeTransport

if TYPE_CHECKING:
    from collections.abc import Callable

    from taskwire.classify import RawOutcome
    from taskwire.request import PreparedRequest


@dataclass
class Recorder:
    """Completion callback that records every invocation and its thread."""

    calls: list[Any] = field(default_factory=list)
    threads: list[str] = field(default_factory=list)

    def __call__(self, result: Any) -> None:
        self.calls.append(result)
        self.threads.append(threading.current_thread().name)


@dataclass
class ScriptedTransport(FakeTransport):
    """FakeTransport that answers every issue synchronously from a script.

    Each script entry is delivered ``repeat`` times to simulate a transport
    that breaks the exactly-once callback contract.
    """

    script: list[RawOutcome] = field(default_factory=list)
    repeat: int = 1

    def issue(
        self, request: PreparedRequest, callback: Callable[[RawOutcome], None]
    ) -> None:
        super().issue(request, callback)
        outcome = self.script.pop(0)
        for _ in range(self.repeat):
            callback(outcome)


@dataclass
class RaisingTransport(FakeTransport):
    """FakeTransport whose issue() raises."""

    error: Exception = field(default_factory=lambda: RuntimeError("socket gone"))

    def issue(
        self, request: PreparedRequest, callback: Callable[[RawOutcome], None]
    ) -> None:
        raise self.error


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    """An ``httpx.Client`` answered in-process by *handler*."""
    return httpx.Client(transport=httpx.MockTransport(handler))


def mock_async_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
