"""Closed taxonomy of failure reasons.

Every way a task can fail is one of the variants below. Callers match on them
exhaustively::

    match reason:
        case NoData():
            ...
        case BadStatusCode(code=code):
            ...
"""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class BadResponse:
    """Bytes arrived but the response could not be interpreted as HTTP."""

    def describe(self) -> str:
        return "bad response"


@dataclasses.dataclass(frozen=True, slots=True)
class NoData:
    """Neither bytes nor a transport error were delivered."""

    def describe(self) -> str:
        return "no data"


@dataclasses.dataclass(frozen=True, slots=True)
class BadStatusCode:
    """The server answered with a status code outside the success range."""

    code: int

    def describe(self) -> str:
        return f"bad status code {self.code}"


@dataclasses.dataclass(frozen=True, slots=True)
class TransportError:
    """The transport failed before any bytes were received."""

    cause: BaseException | str

    def describe(self) -> str:
        return f"transport error: {_cause_text(self.cause)}"


@dataclasses.dataclass(frozen=True, slots=True)
class DecodeError:
    """Bytes were received but could not be decoded into the expected value."""

    cause: BaseException | str

    def describe(self) -> str:
        return f"decode error: {_cause_text(self.cause)}"


Reason = BadResponse | NoData | BadStatusCode | TransportError | DecodeError


def _cause_text(cause: BaseException | str) -> str:
    if isinstance(cause, BaseException):
        text = str(cause)
        name = type(cause).__name__
        return f"{name}: {text}" if text else name
    return cause
