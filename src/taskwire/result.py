"""Result type for network outcomes.

A ``Result`` is either a ``Success`` carrying a value or a ``Failure`` carrying
a ``Reason``. Both variants are frozen; the only way to get a new value is to
construct one or to transform an existing one with ``map``/``flat_map``.

Transformations never raise. An exception escaping the supplied function is
captured as ``Failure(DecodeError(exc))`` so chained decode stages can be
written as plain functions.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

from taskwire.reasons import DecodeError

if TYPE_CHECKING:
    from collections.abc import Callable

    from taskwire.reasons import Reason


@dataclasses.dataclass(frozen=True, slots=True)
class Success[T]:
    """A successful outcome."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    def map[U](self, f: Callable[[T], U]) -> Result[U]:
        """Apply *f* to the value."""
        try:
            return Success(f(self.value))
        except Exception as exc:
            return Failure(DecodeError(exc))

    def flat_map[U](self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Apply *f* to the value and return its result unchanged."""
        try:
            out: Any = f(self.value)
        except Exception as exc:
            return Failure(DecodeError(exc))
        if not isinstance(out, (Success, Failure)):
            return Failure(
                DecodeError(f"flat_map callback returned {type(out).__name__}")
            )
        return out

    def map_reason(self, f: Callable[[Reason], Reason]) -> Result[T]:  # noqa: ARG002
        return self

    def value_or[D](self, default: D) -> T | D:  # noqa: ARG002
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Failure:
    """A failed outcome carrying the classified reason."""

    reason: Reason

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    def map(self, f: Callable[[Any], Any]) -> Failure:  # noqa: ARG002
        """Pass the failure through without calling *f*."""
        return self

    def flat_map(self, f: Callable[[Any], Any]) -> Failure:  # noqa: ARG002
        """Short-circuit without calling *f*."""
        return self

    def map_reason(self, f: Callable[[Reason], Reason]) -> Failure:
        """Replace the reason, e.g. to attach context for the caller."""
        return Failure(f(self.reason))

    def value_or[D](self, default: D) -> D:
        return default


type Result[T] = Success[T] | Failure
