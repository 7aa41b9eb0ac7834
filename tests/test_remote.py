"""Remote API cases: the exact requests each case describes."""

from __future__ import annotations

import base64
import json

import pytest

from taskwire.errors import RequestBuildError
from taskwire.remote import GitHubAPI, RemoteAPI, RequestBin

pytestmark = pytest.mark.contract

BIN = "http://requestb.in/1jk2vpl1"


def test_github_zen() -> None:
    api = GitHubAPI.zen()

    assert isinstance(api, RemoteAPI)
    assert api.descriptor().build().url == "https://api.github.com/zen"


def test_request_bin_cases() -> None:
    payload = json.dumps({"name": "Fred", "age": 21}).encode()

    get = RequestBin.get().descriptor().build()
    delete = RequestBin.delete().descriptor().build()
    put = RequestBin.put(payload).descriptor().build()
    post = RequestBin.post(payload).descriptor().build()
    search = RequestBin.search("hammer").descriptor().build()
    auth = RequestBin.authenticate("jack", "$ecr3t").descriptor().build()

    assert (get.method, get.url) == ("GET", BIN)
    assert (delete.method, delete.url) == ("DELETE", BIN)
    assert (put.method, put.body) == ("PUT", payload)
    assert (post.method, post.headers["Content-Type"]) == ("POST", "application/json")
    assert search.url == f"{BIN}?search=hammer"
    token = base64.b64encode(b"jack:$ecr3t").decode()
    assert auth.headers["Authorization"] == f"Basic {token}"


def test_request_bin_case_missing_arguments_raises() -> None:
    with pytest.raises(RequestBuildError):
        RequestBin("search").descriptor()
