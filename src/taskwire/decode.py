"""Decode stages composed onto classified bytes with ``flat_map``.

Kept separate from ``classify`` so consumers that only need raw bytes never pay
for JSON parsing::

    result = classify(outcome).flat_map(decode_json)
"""

from __future__ import annotations

from collections.abc import Mapping
import json
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from taskwire.reasons import DecodeError
from taskwire.result import Failure, Result, Success

if TYPE_CHECKING:
    from collections.abc import Callable


def decode_json(data: bytes) -> Result[dict[str, Any]]:
    """Parse UTF-8 JSON bytes whose top level must be an object."""
    try:
        obj = json.loads(data)
    except (ValueError, TypeError, RecursionError) as exc:
        # UnicodeDecodeError is a ValueError; deeply nested input recurses.
        return Failure(DecodeError(exc))

    if not isinstance(obj, Mapping):
        return Failure(DecodeError(f"unexpected shape: {type(obj).__name__}"))
    return Success(dict(obj))


def decode_text(data: bytes, encoding: str = "utf-8") -> Result[str]:
    try:
        return Success(data.decode(encoding))
    except (UnicodeDecodeError, LookupError) as exc:
        return Failure(DecodeError(exc))


def decode_model[M: BaseModel](model: type[M]) -> Callable[[bytes], Result[M]]:
    """Build a stage that decodes JSON and validates it into *model*."""

    def _stage(data: bytes) -> Result[M]:
        return decode_json(data).flat_map(_validate)

    def _validate(obj: dict[str, Any]) -> Result[M]:
        try:
            return Success(model.model_validate(obj))
        except ValidationError as exc:
            return Failure(DecodeError(exc))

    return _stage
