"""Declarative HTTP request descriptions.

A ``RequestDescriptor`` says *what* to call; ``build()`` turns it into the
``PreparedRequest`` a transport can send. Descriptors are immutable and
validated on construction, so an invalid combination fails at the call site
rather than producing an empty request later.

Query strings are joined verbatim (``key=value`` pairs separated by ``&`` in
insertion order). Callers that pass untrusted values should build with
``encode_query=True``.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING
from urllib.parse import quote

from taskwire._http import JSON_CONTENT_TYPE
from taskwire.errors import RequestBuildError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

QueryParameters = tuple[tuple[str, str], ...]


class HTTPMethod(str, Enum):
    """HTTP methods a descriptor can carry."""

    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"


_BODYLESS_METHODS = frozenset({HTTPMethod.GET, HTTPMethod.DELETE})


def _freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


def query_string(parameters: Iterable[tuple[str, str]], *, encode: bool = False) -> str:
    """Join query pairs as ``k=v`` separated by ``&``, preserving order."""
    if encode:
        return "&".join(f"{quote(k, safe='')}={quote(v, safe='')}" for k, v in parameters)
    return "&".join(f"{k}={v}" for k, v in parameters)


@dataclass(frozen=True)
class PreparedRequest:
    """A transport-ready request: method, absolute URL, headers, body."""

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: bytes | None = None


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of one HTTP call.

    Prefer the named constructors (``get``, ``post``, ``authenticate`` ...) over
    calling the dataclass directly; they attach the headers each variant needs.
    """

    method: HTTPMethod
    base_url: str
    path: str = ""
    query: QueryParameters = ()
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: bytes | None = None

    def __post_init__(self) -> None:
        """Validate the combination and freeze mutable inputs."""
        try:
            method = HTTPMethod(self.method)
        except ValueError:
            raise RequestBuildError(
                f"Unsupported HTTP method: {self.method!r}",
                hint="Use one of GET, PUT, POST, DELETE.",
            ) from None
        object.__setattr__(self, "method", method)

        if not isinstance(self.base_url, str) or not self.base_url:
            raise RequestBuildError(
                "base_url must be a non-empty string",
                hint="Pass the scheme and host, e.g. 'https://api.github.com'.",
            )
        if self.body is not None and not isinstance(self.body, (bytes, bytearray)):
            raise RequestBuildError(
                f"body must be bytes, got {type(self.body).__name__}",
                hint="Encode the payload first, e.g. json.dumps(obj).encode().",
            )
        if self.body is not None and method in _BODYLESS_METHODS:
            raise RequestBuildError(
                f"{method.value} requests cannot carry a body",
                hint="Use post() or put() to send a payload.",
            )

        try:
            pairs = tuple((str(k), str(v)) for k, v in self.query)
        except (TypeError, ValueError):
            raise RequestBuildError(
                f"query must be a sequence of (key, value) pairs, got {self.query!r}",
                hint="Wrap a single parameter in a tuple: query=(('search', 'hammer'),).",
            ) from None
        object.__setattr__(self, "query", pairs)
        object.__setattr__(self, "headers", _freeze_headers(self.headers))
        if isinstance(self.body, bytearray):
            object.__setattr__(self, "body", bytes(self.body))

    # --- Variant constructors -------------------------------------------------

    @classmethod
    def get(
        cls,
        base_url: str,
        path: str = "",
        *,
        query: Iterable[tuple[str, str]] = (),
        headers: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        return cls(HTTPMethod.GET, base_url, path, tuple(query), _freeze_headers(headers))

    @classmethod
    def delete(
        cls,
        base_url: str,
        path: str = "",
        *,
        headers: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        return cls(HTTPMethod.DELETE, base_url, path, (), _freeze_headers(headers))

    @classmethod
    def post(
        cls,
        base_url: str,
        path: str = "",
        *,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        return cls._with_body(HTTPMethod.POST, base_url, path, body, headers)

    @classmethod
    def put(
        cls,
        base_url: str,
        path: str = "",
        *,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        return cls._with_body(HTTPMethod.PUT, base_url, path, body, headers)

    @classmethod
    def authenticate(
        cls,
        base_url: str,
        username: str,
        password: str,
        *,
        path: str = "",
    ) -> RequestDescriptor:
        """GET carrying a ``Basic`` authorization header for the credentials."""
        return cls.get(
            base_url,
            path,
            headers={"Authorization": basic_auth_header(username, password)},
        )

    @classmethod
    def search(cls, base_url: str, term: str, *, path: str = "") -> RequestDescriptor:
        """GET with a single ``search`` query parameter."""
        return cls.get(base_url, path, query=(("search", term),))

    @classmethod
    def _with_body(
        cls,
        method: HTTPMethod,
        base_url: str,
        path: str,
        body: bytes | None,
        headers: Mapping[str, str] | None,
    ) -> RequestDescriptor:
        merged: dict[str, str] = {}
        if body is not None:
            merged["Content-Type"] = JSON_CONTENT_TYPE
        # Caller-supplied headers win over the automatic content type.
        merged.update(headers or {})
        return cls(method, base_url, path, (), _freeze_headers(merged), body)

    # --- Derivation -----------------------------------------------------------

    def with_query(self, key: str, value: str) -> RequestDescriptor:
        return replace(self, query=(*self.query, (key, value)))

    def with_header(self, name: str, value: str) -> RequestDescriptor:
        return replace(self, headers={**self.headers, name: value})

    # --- Build ----------------------------------------------------------------

    def url(self, *, encode_query: bool = False) -> str:
        base = self.base_url + self.path
        if not self.query:
            return base
        return f"{base}?{query_string(self.query, encode=encode_query)}"

    def build(self, *, encode_query: bool = False) -> PreparedRequest:
        """Produce the transport-ready request. Deterministic for a given descriptor."""
        return PreparedRequest(
            method=self.method.value,
            url=self.url(encode_query=encode_query),
            headers=MappingProxyType(dict(self.headers)),
            body=self.body,
        )


def basic_auth_header(username: str, password: str) -> str:
    """Return the ``Authorization`` value for HTTP Basic credentials."""
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"
