"""Decode stages composed onto classified bytes."""

from __future__ import annotations

import json

from pydantic import BaseModel
import pytest

from taskwire.classify import RawOutcome, classify
from taskwire.decode import decode_json, decode_model, decode_text
from taskwire.reasons import BadStatusCode, DecodeError
from taskwire.result import Failure, Success

pytestmark = pytest.mark.unit


class Person(BaseModel):
    name: str
    age: int


def test_decode_json_returns_mapping() -> None:
    data = json.dumps({"name": "Fred", "age": 21}).encode()

    assert decode_json(data) == Success({"name": "Fred", "age": 21})


@pytest.mark.parametrize("data", [b"<html>", b"{", b"\xff\xfe\x00garbage", b""])
def test_decode_json_never_raises_on_garbage(data: bytes) -> None:
    result = decode_json(data)

    assert isinstance(result, Failure)
    assert isinstance(result.reason, DecodeError)
    assert isinstance(result.reason.cause, ValueError)


@pytest.mark.parametrize("data", [b"[1, 2]", b'"text"', b"42", b"null"])
def test_decode_json_rejects_non_object_top_level(data: bytes) -> None:
    result = decode_json(data)

    assert isinstance(result, Failure)
    assert isinstance(result.reason, DecodeError)
    assert "unexpected shape" in result.reason.describe()


def test_decode_chains_onto_classifier() -> None:
    ok = classify(RawOutcome(data=b'{"a": 1}', status_code=200)).flat_map(decode_json)
    bad = classify(RawOutcome(data=b'{"a": 1}', status_code=500)).flat_map(decode_json)

    assert ok == Success({"a": 1})
    assert bad == Failure(BadStatusCode(500))


def test_decode_text() -> None:
    assert decode_text("héllo".encode()) == Success("héllo")
    result = decode_text(b"\xff")
    assert isinstance(result, Failure)
    assert isinstance(result.reason, DecodeError)


def test_decode_model_validates() -> None:
    stage = decode_model(Person)

    ok = stage(b'{"name": "Fred", "age": 21}')
    assert isinstance(ok, Success)
    assert ok.value == Person(name="Fred", age=21)

    bad = stage(b'{"name": "Fred"}')
    assert isinstance(bad, Failure)
    assert isinstance(bad.reason, DecodeError)


@pytest.mark.parametrize("data", [b"[" * 200000, b'{"a":' + b"[" * 200000])
def test_deeply_nested_input_is_a_decode_failure(data: bytes) -> None:
    for result in (decode_json(data), decode_model(Person)(data)):
        assert isinstance(result, Failure)
        assert isinstance(result.reason, DecodeError)
