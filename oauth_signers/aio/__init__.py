# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import logging
from collections.abc import AsyncIterable, Sequence
from copy import copy, deepcopy
from dataclasses import dataclass, field
from itertools import chain
from typing import Any
from urllib.parse import urlunparse

import aiohttp

from .._http import Field, Fields, format_param_value
from ..exceptions import OAuthHTTPError
from ..interceptors import Interceptor
from ..interfaces.http import FieldPosition, Request, URI
from ..transfer import TransferOptions, resolve_transfer_options

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class HTTPResponse:
    """Basic HTTP response returned by :py:class:`AIOHTTPClient`."""

    body: AsyncIterable[bytes]
    """The response payload as iterable of chunks of bytes."""

    status: int
    """The 3 digit response status code (1xx, 2xx, 3xx, 4xx, 5xx)."""

    fields: Fields
    """HTTP header and trailer fields."""

    reason: str | None = None
    """Optional string provided by the server explaining the status."""

    async def consume_body(self) -> bytes:
        """Iterate over response body and return as bytes."""
        body = b""
        async for chunk in self.body:
            body += chunk
        return body


@dataclass(kw_only=True)
class AIOHTTPClientConfig:
    """Client-level HTTP configuration.

    :param transfer_options: Options applied to every request that does not supply
        its own.
    """

    transfer_options: TransferOptions = field(default_factory=TransferOptions)


class AIOHTTPClient:
    """HTTP client using aiohttp that runs interceptors around each transmission."""

    def __init__(
        self,
        *,
        client_config: AIOHTTPClientConfig | None = None,
        interceptors: Sequence[Interceptor[Request, HTTPResponse]] = (),
        _session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        :param client_config: Configuration that applies to all requests made with this
            client.
        :param interceptors: Hooks run in order around every request, for example
            :py:class:`..interceptors.OAuth1Interceptor`.
        """
        self._config = client_config or AIOHTTPClientConfig()
        self._interceptors = list(interceptors)
        self._session = _session

    async def send(
        self,
        *,
        request: Request,
        transfer_options: TransferOptions | None = None,
    ) -> HTTPResponse:
        """Send HTTP request using aiohttp client.

        :param request: The request including destination URI, fields, payload.
        :param transfer_options: Options specific to this request. Replaces the
            client-level options entirely when given.
        """
        request_kwargs = resolve_transfer_options(
            transfer_options or self._config.transfer_options
        )

        for interceptor in self._interceptors:
            await interceptor.read_before_transmit(request)
        for interceptor in self._interceptors:
            request = await interceptor.modify_before_transmit(request)

        headers_list = list(
            chain.from_iterable(
                fld.as_tuples()
                for fld in request.fields.get_by_type(FieldPosition.HEADER)
            )
        )
        for name, value in request_kwargs.pop("headers", []):
            if name in request.fields:
                logger.warning(
                    "Request already carries a %s header, ignoring the one from "
                    "transfer options.",
                    name,
                )
                continue
            headers_list.append((name, value))
        params = [
            (key, format_param_value(value)) for key, value in request.query.items()
        ]

        logger.debug("Sending %s request to %s", request.method, request.url)
        try:
            async with self._get_session().request(
                method=request.method,
                url=self._serialize_uri_without_query(request.destination),
                params=params,
                headers=headers_list,
                data=request.body,
                **request_kwargs,
            ) as resp:
                response = await self._marshal_response(resp)
        except aiohttp.ClientError as error:
            raise OAuthHTTPError(
                f"{request.method} request to {request.url} failed: {error}"
            ) from error

        for interceptor in self._interceptors:
            await interceptor.read_after_transmit(request, response)
        return response

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()

    def _get_session(self) -> aiohttp.ClientSession:
        # ClientSession must be created inside a running event loop.
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    def _serialize_uri_without_query(self, uri: URI) -> str:
        """Serialize all parts of the URI up to and including the path."""
        components = (uri.scheme, uri.netloc, uri.path or "", "", "", "")
        return urlunparse(components)

    async def _marshal_response(
        self, aiohttp_resp: aiohttp.ClientResponse
    ) -> HTTPResponse:
        """Convert a ``aiohttp.ClientResponse`` to a :py:class:`HTTPResponse`"""
        headers = Fields()
        for header_name, header_val in aiohttp_resp.headers.items():
            try:
                headers[header_name].add(header_val)
            except KeyError:
                headers[header_name] = Field(
                    name=header_name,
                    values=[header_val],
                    kind=FieldPosition.HEADER,
                )

        return HTTPResponse(
            status=aiohttp_resp.status,
            fields=headers,
            body=_async_list([await aiohttp_resp.read()]),
            reason=aiohttp_resp.reason,
        )

    def __deepcopy__(self, memo: Any) -> "AIOHTTPClient":
        return AIOHTTPClient(
            client_config=deepcopy(self._config),
            interceptors=self._interceptors,
            _session=copy(self._session),
        )


async def _async_list[E](lst: list[E]) -> AsyncIterable[E]:
    """Turn an Iterable into an AsyncIterable."""
    for x in lst:
        yield x
