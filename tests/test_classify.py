"""Classification precedence for raw transport outcomes."""

from __future__ import annotations

import pytest

from taskwire.classify import RawOutcome, classify
from taskwire.reasons import BadResponse, BadStatusCode, NoData, TransportError
from taskwire.result import Failure, Success

pytestmark = pytest.mark.unit


def test_nothing_delivered_is_no_data() -> None:
    assert classify(RawOutcome()) == Failure(NoData())


def test_missing_bytes_with_error_is_transport_error() -> None:
    err = ConnectionResetError("reset")

    result = classify(RawOutcome(transport_error=err))

    assert result == Failure(TransportError(err))


def test_transport_error_wins_over_status_code() -> None:
    err = OSError("dns")

    result = classify(RawOutcome(status_code=200, transport_error=err))

    assert result == Failure(TransportError(err))


def test_bytes_without_status_is_bad_response() -> None:
    assert classify(RawOutcome(data=b"x")) == Failure(BadResponse())


@pytest.mark.parametrize("status", [200, 201, 202, 203, 204])
def test_success_range_is_inclusive(status: int) -> None:
    assert classify(RawOutcome(data=b"body", status_code=status)) == Success(b"body")


@pytest.mark.parametrize("status", [199, 205, 301, 404, 500])
def test_outside_success_range_is_bad_status(status: int) -> None:
    result = classify(RawOutcome(data=b"body", status_code=status))

    assert result == Failure(BadStatusCode(status))


def test_empty_body_counts_as_data() -> None:
    assert classify(RawOutcome(data=b"", status_code=204)) == Success(b"")


def test_bytes_present_ignores_stray_transport_error() -> None:
    result = classify(
        RawOutcome(data=b"ok", status_code=200, transport_error=RuntimeError("late"))
    )

    assert result == Success(b"ok")
