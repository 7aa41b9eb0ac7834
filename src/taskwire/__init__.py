"""taskwire: typed, exactly-once HTTP task results.

Public API:
    - RequestDescriptor: declarative description of one HTTP call
    - TaskExecutor: issues descriptors and completes each task exactly once
    - Success / Failure / Result: the outcome of a task
    - Reason variants: BadResponse, NoData, BadStatusCode, TransportError, DecodeError
    - classify / decode_json: the stages between raw bytes and a value
"""

from __future__ import annotations

import logging

from taskwire.classify import RawOutcome, classify
from taskwire.config import ClientConfig
from taskwire.context import (
    EventLoopContext,
    ExecutionContext,
    ImmediateContext,
    QueueContext,
)
from taskwire.decode import decode_json, decode_model, decode_text
from taskwire.errors import (
    ConfigurationError,
    RequestBuildError,
    TaskwireError,
    TransportClosedError,
)
from taskwire.executor import TaskExecutor, TaskHandle, TaskState
from taskwire.future import Future
from taskwire.reasons import (
    BadResponse,
    BadStatusCode,
    DecodeError,
    NoData,
    Reason,
    TransportError,
)
from taskwire.request import HTTPMethod, PreparedRequest, RequestDescriptor
from taskwire.result import Failure, Result, Success
from taskwire.retry import RetryPolicy, retry_async, should_retry
from taskwire.transport import AsyncHttpxTransport, HttpxTransport, Transport

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("taskwire")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("taskwire").addHandler(logging.NullHandler())


def open_executor(
    config: ClientConfig | None = None,
    *,
    context: ExecutionContext | None = None,
) -> TaskExecutor:
    """Create an executor over a fresh ``HttpxTransport``.

    Example:
        with open_executor() as executor:
            handle = executor.start(RequestDescriptor.get("https://api.github.com", "/zen"), print)
            handle.wait(10)
    """
    return TaskExecutor(HttpxTransport(config), context)


__all__ = [
    "AsyncHttpxTransport",
    "BadResponse",
    "BadStatusCode",
    "ClientConfig",
    "ConfigurationError",
    "DecodeError",
    "EventLoopContext",
    "ExecutionContext",
    "Failure",
    "Future",
    "HTTPMethod",
    "HttpxTransport",
    "ImmediateContext",
    "NoData",
    "PreparedRequest",
    "QueueContext",
    "RawOutcome",
    "Reason",
    "RequestBuildError",
    "RequestDescriptor",
    "Result",
    "RetryPolicy",
    "Success",
    "TaskExecutor",
    "TaskHandle",
    "TaskState",
    "TaskwireError",
    "Transport",
    "TransportClosedError",
    "TransportError",
    "classify",
    "decode_json",
    "decode_model",
    "decode_text",
    "open_executor",
    "retry_async",
    "should_retry",
]
