"""Classification of raw transport outcomes.

``classify`` is pure and synchronous: it inspects what the transport handed
back and decides which ``Reason`` (if any) applies. It never retries and never
raises.
"""

from __future__ import annotations

from dataclasses import dataclass

from taskwire._http import SUCCESS_STATUS_MAX, SUCCESS_STATUS_MIN
from taskwire.reasons import BadResponse, BadStatusCode, NoData, TransportError
from taskwire.result import Failure, Result, Success


@dataclass(frozen=True)
class RawOutcome:
    """What the transport returned for one issued request."""

    data: bytes | None = None
    status_code: int | None = None
    transport_error: BaseException | None = None


def classify(outcome: RawOutcome) -> Result[bytes]:
    """Map a raw outcome to ``Success(bytes)`` or a classified ``Failure``.

    Precedence:
        1. no bytes, no error      -> NoData
        2. no bytes, error         -> TransportError
        3. bytes, no status code   -> BadResponse
        4. status in [200, 204]    -> Success
        5. anything else           -> BadStatusCode
    """
    if outcome.data is None:
        if outcome.transport_error is None:
            return Failure(NoData())
        return Failure(TransportError(outcome.transport_error))

    if outcome.status_code is None:
        return Failure(BadResponse())

    if SUCCESS_STATUS_MIN <= outcome.status_code <= SUCCESS_STATUS_MAX:
        return Success(outcome.data)
    return Failure(BadStatusCode(outcome.status_code))
