# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import io
import logging
from collections.abc import AsyncIterable, Iterable, Mapping

from ._http import Field
from .canonical import (
    SIGNATURE_PARAM,
    build_base_string,
    is_form_content,
    percent_encode,
)
from .config import SigningConfig
from .interfaces.http import Request
from .signature import current_timestamp, signing_key

logger = logging.getLogger(__name__)

AUTHORIZATION = "Authorization"


class OAuth1Signer:
    """Request signer for applying the OAuth 1.0 (RFC 5849) signature.

    The signer holds no per-request state, so a single instance can sign requests
    from any number of threads.
    """

    def __init__(self, config: SigningConfig) -> None:
        """
        :param config: Credentials and signing options shared by every request.
        """
        self._config = config

    @property
    def config(self) -> SigningConfig:
        return self._config

    def sign(self, request: Request, *, timestamp: int | None = None) -> None:
        """Generate and apply an OAuth signature to the supplied request.

        Exactly one field is changed: ``Authorization`` is set, replacing any
        previous value. The query and body are left untouched.

        :param request: The request to sign in place.
        :param timestamp: Seconds since the epoch. Defaults to the current time.
        """
        params = self.oauth_params(request, timestamp=timestamp)
        params[SIGNATURE_PARAM] = self._signature(request, params)
        request.fields.set_field(self.authorization_field(params))
        logger.debug(
            "Signed %s request to %s with parameters: %s",
            request.method,
            request.destination.build(),
            ", ".join(sorted(params)),
        )

    def string_to_sign(
        self,
        request: Request,
        *,
        timestamp: int | None = None,
        nonce: str | None = None,
    ) -> str:
        """Build the signature base string without modifying the request.

        This is useful to compare against the server's expectations when
        debugging signature mismatches.

        :param request: The request to inspect.
        :param timestamp: Seconds since the epoch. Defaults to the current time.
        :param nonce: An explicit nonce. Defaults to the configured generator.
        """
        params = self.oauth_params(request, timestamp=timestamp, nonce=nonce)
        return self._string_to_sign(request, params)

    def signature(
        self,
        request: Request,
        *,
        timestamp: int | None = None,
        nonce: str | None = None,
    ) -> str:
        """Compute the ``oauth_signature`` value without modifying the request."""
        params = self.oauth_params(request, timestamp=timestamp, nonce=nonce)
        return self._signature(request, params)

    def oauth_params(
        self,
        request: Request,
        *,
        timestamp: int | None = None,
        nonce: str | None = None,
    ) -> dict[str, str]:
        """Assemble the protocol parameters for one signing operation.

        Optional parameters (token, callback, verifier, version and the extra
        parameters) are left out entirely when empty, so the base string and the
        header always carry the same set.
        """
        if timestamp is None:
            timestamp = current_timestamp()
        if nonce is None:
            nonce = self._config.nonce_generator.generate(request, timestamp)

        params = {
            "oauth_consumer_key": self._config.consumer_key,
            "oauth_nonce": nonce,
            "oauth_signature_method": self._config.signature_method,
            "oauth_timestamp": str(timestamp),
        }
        optional = {
            "oauth_callback": self._config.callback,
            "oauth_token": self._config.token,
            "oauth_verifier": self._config.verifier,
            "oauth_version": self._config.version,
        }
        optional.update(self._config.extra_params)
        params.update((key, value) for key, value in optional.items() if value)
        return params

    def authorization_field(self, params: Mapping[str, str]) -> Field:
        """Generate the ``Authorization`` field from signed protocol parameters.

        Parameters with empty values are dropped, except ``oauth_signature``. The
        rest are sorted by name and rendered as ``name="enc(value)"`` pairs.
        """
        parts = [
            f'{key}="{percent_encode(value)}"'
            for key, value in sorted(params.items())
            if value or key == SIGNATURE_PARAM
        ]
        if self._config.realm is not None:
            realm = self._config.realm.replace("\\", "\\\\").replace('"', '\\"')
            parts.insert(0, f'realm="{realm}"')
        return Field(name=AUTHORIZATION, values=[f"OAuth {', '.join(parts)}"])

    def _string_to_sign(self, request: Request, params: Mapping[str, str]) -> str:
        return build_base_string(
            request, params, include_body=not self._config.disable_post_params
        )

    def _signature(self, request: Request, params: Mapping[str, str]) -> str:
        key = signing_key(self._config.consumer_secret, self._config.token_secret)
        return self._config.method.sign(self._string_to_sign(request, params), key)


class AsyncOAuth1Signer:
    """Coroutine interface over :py:class:`OAuth1Signer` for async request bodies.

    Form bodies supplied as an ``AsyncIterable[bytes]`` are drained and re-attached
    as ``bytes`` before canonicalization. Everything else is delegated unchanged.
    """

    def __init__(self, config: SigningConfig) -> None:
        self._signer = OAuth1Signer(config)

    @property
    def config(self) -> SigningConfig:
        return self._signer.config

    async def sign(self, request: Request, *, timestamp: int | None = None) -> None:
        await self._buffer_async_body(request)
        self._signer.sign(request, timestamp=timestamp)

    async def string_to_sign(
        self,
        request: Request,
        *,
        timestamp: int | None = None,
        nonce: str | None = None,
    ) -> str:
        await self._buffer_async_body(request)
        return self._signer.string_to_sign(request, timestamp=timestamp, nonce=nonce)

    async def signature(
        self,
        request: Request,
        *,
        timestamp: int | None = None,
        nonce: str | None = None,
    ) -> str:
        await self._buffer_async_body(request)
        return self._signer.signature(request, timestamp=timestamp, nonce=nonce)

    async def _buffer_async_body(self, request: Request) -> None:
        body = request.body
        if (
            self.config.disable_post_params
            or not isinstance(body, AsyncIterable)
            or isinstance(body, Iterable)
            or not is_form_content(request)
        ):
            return

        buffer = io.BytesIO()
        async for chunk in body:
            buffer.write(chunk)
        request.body = buffer.getvalue()
