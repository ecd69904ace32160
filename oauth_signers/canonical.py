# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Construction of the OAuth 1.0 signature base string (RFC 5849 Section 3.4.1)."""

import io
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from urllib.parse import parse_qsl, quote, urlunsplit

from ._http import FORM_URLENCODED, format_param_value
from .interfaces.http import QueryValue, Request
from .interfaces.io import ByteStream, Seekable

logger = logging.getLogger(__name__)

DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}
SIGNATURE_PARAM = "oauth_signature"

type ParamPairs = list[tuple[str, str]]


def percent_encode(value: QueryValue) -> str:
    """Percent-encode a value per RFC 3986 Section 2.1.

    Only unreserved characters (``ALPHA``, ``DIGIT``, ``-``, ``.``, ``_``, ``~``) are
    left as-is. Everything else is UTF-8 encoded and escaped with upper case hex.
    """
    return quote(format_param_value(value), safe="~")


@dataclass(kw_only=True, frozen=True)
class CanonicalRequest:
    """Read view over the parts of a request that participate in signing."""

    method: str
    """Upper case HTTP method."""

    url: str
    """Base string URI: lower case scheme and host, no default port, no query."""

    query: ParamPairs
    """Query parameters in request order with values already stringified."""

    body_params: ParamPairs
    """Form body parameters, empty unless the body is signable form data."""

    @classmethod
    def from_request(
        cls, request: Request, *, include_body: bool = True
    ) -> "CanonicalRequest":
        """Build the view for ``request``.

        :param request: The request to read. It is not modified, except that a
            one-shot iterable body is buffered and re-attached so it can still be
            sent.
        :param include_body: Whether form body parameters may be collected.
        """
        body_params: ParamPairs = []
        if include_body and is_form_content(request):
            body_params = _read_form_params(request)

        return cls(
            method=request.method.upper(),
            url=base_string_uri(request),
            query=_stringify(request.query.items()),
            body_params=body_params,
        )

    def signing_params(self, oauth_params: Mapping[str, str]) -> ParamPairs:
        """Every parameter that is signed, in collection order.

        ``oauth_signature`` is never part of the set.
        """
        params = [*self.query, *self.body_params]
        params.extend(
            (key, format_param_value(value))
            for key, value in oauth_params.items()
            if key != SIGNATURE_PARAM
        )
        return params


def base_string_uri(request: Request) -> str:
    """Format the request URL for the base string (RFC 5849 Section 3.4.1.2)."""
    uri = request.destination
    scheme = uri.scheme.lower()
    host = uri.host.lower()
    if ":" in host:
        host = f"[{host}]"
    if uri.port is not None and DEFAULT_PORTS.get(scheme) != uri.port:
        host = f"{host}:{uri.port}"
    return urlunsplit((scheme, host, uri.path or "/", "", ""))


def normalize_parameters(params: Iterable[tuple[str, str]]) -> str:
    """Encode, sort, and join parameters into the parameter string.

    Pairs are ordered by encoded name, then encoded value. ``sorted`` is stable so
    fully identical pairs keep their relative order.
    """
    encoded = [(percent_encode(key), percent_encode(value)) for key, value in params]
    encoded.sort(key=lambda pair: (pair[0], pair[1]))
    return "&".join(f"{key}={value}" for key, value in encoded)


def build_base_string(
    request: Request,
    oauth_params: Mapping[str, str],
    *,
    include_body: bool = True,
) -> str:
    """Create the signature base string.

    The base string is defined as::

        <METHOD>&<enc(base string URI)>&<enc(normalized parameters)>

    :param request: The request being signed.
    :param oauth_params: The protocol parameters for this signing operation.
    :param include_body: Whether form body parameters are signed.
    """
    canonical = CanonicalRequest.from_request(request, include_body=include_body)
    parameter_string = normalize_parameters(canonical.signing_params(oauth_params))
    base_string = "&".join(
        (
            canonical.method,
            percent_encode(canonical.url),
            percent_encode(parameter_string),
        )
    )
    logger.debug("Signature base string: %s", base_string)
    return base_string


def _stringify(pairs: Iterable[tuple[str, QueryValue]]) -> ParamPairs:
    return [(key, format_param_value(value)) for key, value in pairs]


def is_form_content(request: Request) -> bool:
    content_type = request.fields.get("Content-Type")
    if content_type is None or not content_type.values:
        return True
    media_type = content_type.values[0].split(";", 1)[0].strip().lower()
    return media_type in ("", FORM_URLENCODED)


def _read_form_params(request: Request) -> ParamPairs:
    payload = _read_body(request)
    if not payload:
        return []
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Request body is not form data, skipping body parameters.")
        return []
    # A bare name is a parameter with an empty value, matching QueryParams.encode.
    return parse_qsl(text, keep_blank_values=True)


def _read_body(request: Request) -> bytes:
    body = request.body
    if body is None:
        return b""

    if isinstance(body, bytes | bytearray):
        return bytes(body)

    if isinstance(body, Seekable) and isinstance(body, ByteStream):
        position = body.tell()
        payload = body.read()
        body.seek(position)
        return payload if isinstance(payload, bytes) else b""

    if not isinstance(body, Iterable):
        logger.debug("Asynchronous body attached to a synchronous read, skipping.")
        return b""

    buffer = io.BytesIO()
    for chunk in body:
        buffer.write(chunk)
    buffer.seek(0)
    request.body = buffer
    return buffer.getvalue()
