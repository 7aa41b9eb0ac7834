"""Declarative remote APIs.

A ``RemoteAPI`` is any value that knows its base URL and can describe itself
as a ``RequestDescriptor``. Endpoints are small frozen values, so a whole API
surface reads as a list of cases:

    executor.fetch(GitHubAPI.zen().descriptor())
    executor.fetch(RequestBin.search("hammer").descriptor())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

from taskwire.errors import RequestBuildError
from taskwire.request import RequestDescriptor


@runtime_checkable
class RemoteAPI(Protocol):
    @property
    def base_url(self) -> str: ...

    def descriptor(self) -> RequestDescriptor: ...


@dataclass(frozen=True)
class GitHubAPI:
    """Public, unauthenticated GitHub endpoints."""

    path: str
    base_url: str = "https://api.github.com"

    @classmethod
    def zen(cls) -> GitHubAPI:
        return cls("/zen")

    def descriptor(self) -> RequestDescriptor:
        return RequestDescriptor.get(self.base_url, self.path)


RequestBinCase = Literal["get", "delete", "put", "post", "search", "authenticate"]


@dataclass(frozen=True)
class RequestBin:
    """A request-inspection bin: every case targets the same bin URL."""

    case: RequestBinCase
    payload: bytes | None = None
    term: str | None = None
    credentials: tuple[str, str] | None = None
    base_url: str = "http://requestb.in/1jk2vpl1"

    @classmethod
    def get(cls) -> RequestBin:
        return cls("get")

    @classmethod
    def delete(cls) -> RequestBin:
        return cls("delete")

    @classmethod
    def put(cls, payload: bytes) -> RequestBin:
        return cls("put", payload=payload)

    @classmethod
    def post(cls, payload: bytes) -> RequestBin:
        return cls("post", payload=payload)

    @classmethod
    def search(cls, term: str) -> RequestBin:
        return cls("search", term=term)

    @classmethod
    def authenticate(cls, username: str, password: str) -> RequestBin:
        return cls("authenticate", credentials=(username, password))

    def descriptor(self) -> RequestDescriptor:
        match self.case:
            case "get":
                return RequestDescriptor.get(self.base_url)
            case "delete":
                return RequestDescriptor.delete(self.base_url)
            case "put":
                return RequestDescriptor.put(self.base_url, body=self.payload)
            case "post":
                return RequestDescriptor.post(self.base_url, body=self.payload)
            case "search" if self.term is not None:
                return RequestDescriptor.search(self.base_url, self.term)
            case "authenticate" if self.credentials is not None:
                username, password = self.credentials
                return RequestDescriptor.authenticate(self.base_url, username, password)
        raise RequestBuildError(
            f"RequestBin case {self.case!r} is missing its arguments",
            hint="Build cases with the RequestBin classmethods.",
        )
