# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import logging
from collections.abc import Callable

from .interfaces.http import Request
from .signers import AsyncOAuth1Signer

logger = logging.getLogger(__name__)


class Interceptor[TransportRequest, TransportResponse]:
    """Allows injecting code into a client's request transmission pipeline.

    Hooks are either "read" hooks, which make it possible to read in-flight
    requests or responses, or "read/write" hooks, which make it possible to modify
    in-flight requests. Interceptors run in the order they were registered with the
    client.
    """

    async def read_before_transmit(self, request: TransportRequest) -> None:
        """A hook called before the request is modified for transmission.

        Implementations MUST NOT modify the `request` in this hook.

        If exceptions are thrown by this hook, the request is not sent and the
        exception propagates to the caller.
        """

    async def modify_before_transmit(
        self, request: TransportRequest
    ) -> TransportRequest:
        """A hook called immediately before the request is sent.

        This method has the ability to modify and return a new request of the same
        type. It is the last point at which the request may change, so signatures
        applied here cover the request exactly as transmitted.

        The request returned by this hook MUST be the same type of request message
        passed into this hook.
        """
        return request

    async def read_after_transmit(
        self, request: TransportRequest, response: TransportResponse
    ) -> None:
        """A hook called after the response is received.

        Implementations MUST NOT modify the `request` or `response` in this hook.
        """


class OAuth1Interceptor[TransportResponse](Interceptor[Request, TransportResponse]):
    """Signs every outgoing request with OAuth 1.0 just before it is transmitted."""

    def __init__(
        self,
        signer: AsyncOAuth1Signer,
        *,
        timestamp_provider: Callable[[], int] | None = None,
    ) -> None:
        """
        :param signer: The signer holding the client's credentials.
        :param timestamp_provider: Supplies the ``oauth_timestamp`` for each request.
            Defaults to the current time.
        """
        self._signer = signer
        self._timestamp_provider = timestamp_provider

    async def modify_before_transmit(self, request: Request) -> Request:
        timestamp = self._timestamp_provider() if self._timestamp_provider else None
        await self._signer.sign(request, timestamp=timestamp)
        logger.debug("Applied OAuth 1.0 Authorization to %r", request)
        return request
