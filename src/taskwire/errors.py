"""Exception hierarchy for taskwire.

Network, status and decode failures never surface as exceptions: they travel
as ``Reason`` values inside a ``Failure``. The exceptions here are reserved for
programming and configuration mistakes made by the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class TaskwireError(Exception):
    """Base exception for all taskwire errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(TaskwireError):
    """Configuration validation or resolution failed."""


class RequestBuildError(TaskwireError):
    """A request descriptor could not be turned into a transport request."""


class TransportClosedError(TaskwireError):
    """A request was issued on a transport that has already been closed."""


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
