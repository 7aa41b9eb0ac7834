"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration and the shared transport
test double. Fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import logging
import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable

    from taskwire.classify import RawOutcome
    from taskwire.request import PreparedRequest

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeTransport:
    """Transport test double that records issued requests.

    Callbacks are held until the test fires them with ``respond``; nothing
    touches the network.
    """

    issued: list[PreparedRequest] = field(default_factory=list)
    callbacks: list[Callable[[RawOutcome], None]] = field(default_factory=list)
    close_calls: int = 0

    def issue(
        self, request: PreparedRequest, callback: Callable[[RawOutcome], None]
    ) -> None:
        self.issued.append(request)
        self.callbacks.append(callback)

    def close(self) -> None:
        self.close_calls += 1

    def respond(self, outcome: RawOutcome, *, index: int = -1) -> None:
        self.callbacks[index](outcome)


BASE_URL = "https://example.test"

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_taskwire_env(request, monkeypatch):
    """Clear TASKWIRE_* env vars to prevent test pollution.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("TASKWIRE_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()
