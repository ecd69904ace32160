# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Request primitives consumed by the signers and HTTP clients."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import AsyncIterable, Iterable, Iterator, Mapping
from copy import deepcopy
from dataclasses import dataclass, replace
from functools import cached_property
from urllib.parse import parse_qsl, quote, urlsplit, urlunparse

import oauth_signers.interfaces.http as interfaces_http

from .exceptions import ConfigurationError
from .interfaces.http import QueryValue

FORM_URLENCODED = "application/x-www-form-urlencoded"

type Body = AsyncIterable[bytes] | Iterable[bytes] | bytes | None


class Field(interfaces_http.Field):
    """A name-value pair representing a single field in an HTTP Request or Response.

    All field names are case insensitive and case-variance must be treated as
    equivalent. Names may be normalized but should be preserved for accuracy during
    transmission.
    """

    def __init__(
        self,
        *,
        name: str,
        values: Iterable[str] | None = None,
        kind: interfaces_http.FieldPosition = interfaces_http.FieldPosition.HEADER,
    ):
        self.name = name
        self.values: list[str] = list(values) if values is not None else []
        self.kind = kind

    def add(self, value: str) -> None:
        self.values.append(value)

    def set(self, values: list[str]) -> None:
        self.values = values

    def remove(self, value: str) -> None:
        self.values = [val for val in self.values if val != value]

    def as_string(self, delimiter: str = ", ") -> str:
        """Get delimited string of all values.

        A single value is returned unmodified. For multi-valued fields, values that
        contain commas or double quotes are quoted and escaped before joining.
        """
        if len(self.values) == 1:
            return self.values[0]
        return delimiter.join(quote_and_escape_field_value(val) for val in self.values)

    def as_tuples(self) -> list[tuple[str, str]]:
        return [(self.name, val) for val in self.values]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return False
        return (
            self.name == other.name
            and self.kind is other.kind
            and self.values == other.values
        )

    def __repr__(self) -> str:
        return f"Field(name={self.name!r}, value={self.values!r}, kind={self.kind!r})"


class Fields(interfaces_http.Fields):
    def __init__(
        self,
        initial: Iterable[interfaces_http.Field] | None = None,
        *,
        encoding: str = "utf-8",
    ):
        """Collection of header and trailer entries mapped by name.

        :param initial: Initial list of ``Field`` objects. Names must be unique
            once normalized.
        :param encoding: The string encoding used when converting the ``Field``
            name and value from ``str`` to ``bytes`` for transmission.
        """
        self.entries: OrderedDict[str, interfaces_http.Field] = OrderedDict()
        self.encoding: str = encoding
        for fld in initial or ():
            name = self._normalize_field_name(fld.name)
            if name in self.entries:
                raise ValueError(
                    "Field names of the initial list of fields must be unique. "
                    f"{fld.name!r} appears more than once."
                )
            self.entries[name] = fld

    def set_field(self, field: interfaces_http.Field) -> None:
        """Alias for __setitem__ to utilize the field.name for the entry key."""
        self.__setitem__(field.name, field)

    def __setitem__(self, name: str, field: interfaces_http.Field) -> None:
        """Set or override entry for a Field name."""
        normalized_name = self._normalize_field_name(name)
        if normalized_name != self._normalize_field_name(field.name):
            raise ValueError(
                f"Supplied key {name} does not match Field.name "
                f"provided: {field.name}"
            )
        self.entries[normalized_name] = field

    def get(
        self, key: str, default: interfaces_http.Field | None = None
    ) -> interfaces_http.Field | None:
        return self[key] if key in self else default

    def __getitem__(self, name: str) -> interfaces_http.Field:
        return self.entries[self._normalize_field_name(name)]

    def __delitem__(self, name: str) -> None:
        del self.entries[self._normalize_field_name(name)]

    def get_by_type(
        self, kind: interfaces_http.FieldPosition
    ) -> list[interfaces_http.Field]:
        return [entry for entry in self.entries.values() if entry.kind is kind]

    def _normalize_field_name(self, name: str) -> str:
        return name.lower()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fields):
            return False
        return self.encoding == other.encoding and self.entries == other.entries

    def __iter__(self) -> Iterator[interfaces_http.Field]:
        yield from self.entries.values()

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"Fields({self.entries})"

    def __contains__(self, key: str) -> bool:
        return self._normalize_field_name(key) in self.entries


class QueryParams(interfaces_http.QueryParams):
    """Ordered multimap of query string parameters."""

    def __init__(
        self,
        initial: Mapping[str, QueryValue] | Iterable[tuple[str, QueryValue]] = (),
    ):
        pairs = initial.items() if isinstance(initial, Mapping) else initial
        self._pairs: list[tuple[str, QueryValue]] = list(pairs)

    @classmethod
    def from_string(cls, query: str | None) -> QueryParams:
        if not query:
            return cls()
        return cls(parse_qsl(query, keep_blank_values=True))

    def add(self, name: str, value: QueryValue) -> None:
        self._pairs.append((name, value))

    def set(self, name: str, value: QueryValue) -> None:
        updated: list[tuple[str, QueryValue]] = []
        replaced = False
        for key, existing in self._pairs:
            if key != name:
                updated.append((key, existing))
            elif not replaced:
                updated.append((name, value))
                replaced = True
        if not replaced:
            updated.append((name, value))
        self._pairs = updated

    def get(self, name: str) -> list[QueryValue]:
        return [value for key, value in self._pairs if key == name]

    def remove(self, name: str) -> None:
        self._pairs = [(key, value) for key, value in self._pairs if key != name]

    def items(self) -> list[tuple[str, QueryValue]]:
        return list(self._pairs)

    def encode(self) -> str:
        """Serialize with RFC 3986 escaping. ``None`` values render as a bare name."""
        parts: list[str] = []
        for key, value in self._pairs:
            if value is None:
                parts.append(_escape(key))
            else:
                parts.append(f"{_escape(key)}={_escape(format_param_value(value))}")
        return "&".join(parts)

    def __contains__(self, name: str) -> bool:
        return any(key == name for key, _ in self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryParams):
            return False
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"QueryParams({self._pairs!r})"


@dataclass(kw_only=True, frozen=True)
class URI(interfaces_http.URI):
    """Universal Resource Identifier, target location for a :py:class:`HTTPRequest`."""

    scheme: str = "https"
    """For example ``http`` or ``https``."""

    username: str | None = None
    """Username part of the userinfo URI component."""

    password: str | None = None
    """Password part of the userinfo URI component."""

    host: str
    """The hostname, for example ``api.example.com``."""

    port: int | None = None
    """An explicit port number."""

    path: str | None = None
    """Path component of the URI."""

    query: str | None = None
    """Query component of the URI as string."""

    fragment: str | None = None
    """Part of the URI specification, but may not be transmitted by a client."""

    @classmethod
    def from_string(cls, url: str) -> URI:
        parts = urlsplit(url)
        if not parts.scheme or parts.hostname is None:
            raise ConfigurationError(f"Unable to parse an absolute URL from {url!r}")
        return cls(
            scheme=parts.scheme,
            username=parts.username,
            password=parts.password,
            host=parts.hostname,
            port=parts.port,
            path=parts.path or "/",
            query=parts.query or None,
            fragment=parts.fragment or None,
        )

    @property
    def netloc(self) -> str:
        """Construct netloc string in format ``{username}:{password}@{host}:{port}``

        ``username``, ``password``, and ``port`` are only included if set. ``password``
        is ignored, unless ``username`` is also set.
        """
        return self._netloc

    # cached_property allows setting, so it is kept behind the netloc property.
    @cached_property
    def _netloc(self) -> str:
        if self.username is not None:
            password = "" if self.password is None else f":{self.password}"
            userinfo = f"{self.username}{password}@"
        else:
            userinfo = ""

        port = f":{self.port}" if self.port is not None else ""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{userinfo}{host}{port}"

    def build(self) -> str:
        """Construct URI string representation.

        Returns a string of the form
        ``{scheme}://{username}:{password}@{host}:{port}{path}?{query}#{fragment}``
        """
        components = (
            self.scheme,
            self.netloc,
            self.path or "",
            "",  # params
            self.query,
            self.fragment,
        )
        return urlunparse(components)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, URI):
            return False
        return (
            self.scheme == other.scheme
            and self.host == other.host
            and self.port == other.port
            and self.path == other.path
            and self.query == other.query
            and self.username == other.username
            and self.password == other.password
            and self.fragment == other.fragment
        )


class HTTPRequest(interfaces_http.Request):
    """A mutable HTTP request.

    The query string lives in ``query`` rather than on the ``destination`` so that
    parameters keep their native types (booleans in particular) until they are
    serialized or canonicalized.
    """

    def __init__(
        self,
        *,
        method: str,
        destination: URI,
        query: QueryParams | None = None,
        fields: Fields | None = None,
        body: Body = None,
    ):
        self.method = method
        self.destination = destination
        self.query = query if query is not None else QueryParams()
        self.fields = fields if fields is not None else Fields()
        self.body = body

    @classmethod
    def create(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: Body = None,
        form: Mapping[str, QueryValue] | Iterable[tuple[str, QueryValue]] | None = None,
    ) -> HTTPRequest:
        """Build a request from a URL string.

        :param method: The HTTP method.
        :param url: An absolute URL. Its query string becomes ``query``.
        :param headers: Header names and values.
        :param body: A raw body. Mutually exclusive with ``form``.
        :param form: Parameters to send as an ``application/x-www-form-urlencoded``
            body. ``Content-Type`` is set unless already given in ``headers``.
        """
        if body is not None and form is not None:
            raise ConfigurationError("Only one of body or form may be supplied.")

        uri = URI.from_string(url)
        fields = Fields([Field(name=k, values=[v]) for k, v in (headers or {}).items()])
        if form is not None:
            body = QueryParams(form).encode().encode("utf-8")
            if "Content-Type" not in fields:
                fields.set_field(Field(name="Content-Type", values=[FORM_URLENCODED]))

        return cls(
            method=method.upper(),
            destination=replace(uri, query=None),
            query=QueryParams.from_string(uri.query),
            fields=fields,
            body=body,
        )

    @property
    def url(self) -> str:
        return replace(self.destination, query=self.query.encode() or None).build()

    def __deepcopy__(self, memo: dict[int, HTTPRequest] | None = None) -> HTTPRequest:
        if memo is None:
            memo = {}

        if id(self) in memo:
            return memo[id(self)]

        # the destination is immutable and the body may be a one-shot iterator
        new_instance = self.__class__(
            method=self.method,
            destination=self.destination,
            query=QueryParams(self.query.items()),
            fields=deepcopy(self.fields, memo),
            body=self.body,
        )
        memo[id(self)] = new_instance
        return new_instance

    def __repr__(self) -> str:
        return f"HTTPRequest(method={self.method!r}, url={self.url!r})"


def format_param_value(value: QueryValue) -> str:
    """Convert a scalar parameter value to its wire form.

    Booleans render as ``true`` / ``false`` rather than ``True`` or ``1``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def quote_and_escape_field_value(value: str) -> str:
    """Escapes and quotes a single :class:`Field` value if necessary.

    See :func:`Field.as_string` for quoting and escaping logic.
    """
    chars_to_quote = (",", '"')
    if any(char in chars_to_quote for char in value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    else:
        return value


def _escape(value: str) -> str:
    return quote(value, safe="~")
