# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import base64
import hmac
import logging
import os
import time
from hashlib import sha1

from .canonical import percent_encode
from .exceptions import ConfigurationError
from .interfaces.http import Request
from .interfaces.signing import NonceGenerator, SignatureCallback, SignatureMethod

logger = logging.getLogger(__name__)

HMAC_SHA1 = "HMAC-SHA1"
PLAINTEXT = "PLAINTEXT"


class HMACSHA1SignatureMethod(SignatureMethod):
    """RFC 5849 Section 3.4.2 ``HMAC-SHA1``."""

    name = HMAC_SHA1

    def sign(self, base_string: str, key: str) -> str:
        digest = hmac.new(
            key=key.encode("utf-8"), msg=base_string.encode("utf-8"), digestmod=sha1
        ).digest()
        return base64.b64encode(digest).decode("ascii")


class PlaintextSignatureMethod(SignatureMethod):
    """RFC 5849 Section 3.4.4 ``PLAINTEXT``: the signature is the key itself."""

    name = PLAINTEXT

    def sign(self, base_string: str, key: str) -> str:
        return key


class CallbackSignatureMethod(SignatureMethod):
    """Delegates signing to a caller supplied function.

    The function is called with ``(base_string, key)``. A ``bytes`` result is a raw
    digest and gets base64 encoded, a ``str`` result is used verbatim.
    """

    def __init__(self, callback: SignatureCallback, *, name: str) -> None:
        self._callback = callback
        self.name = name

    def sign(self, base_string: str, key: str) -> str:
        result = self._callback(base_string, key)
        if isinstance(result, bytes | bytearray):
            return base64.b64encode(result).decode("ascii")
        return result


SIGNATURE_METHODS: dict[str, type[SignatureMethod]] = {
    HMAC_SHA1: HMACSHA1SignatureMethod,
    PLAINTEXT: PlaintextSignatureMethod,
}


def resolve_signature_method(
    name: str, callback: SignatureCallback | None = None
) -> SignatureMethod:
    """Pick the signature method strategy for a configuration.

    :raises ConfigurationError: If ``name`` is not supported and no callback is
        available to compute it.
    """
    if callback is not None:
        logger.debug("Signing %s signatures with a caller supplied callback", name)
        return CallbackSignatureMethod(callback, name=name)
    try:
        return SIGNATURE_METHODS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unsupported signature method {name!r}. Supported methods are "
            f"{', '.join(SIGNATURE_METHODS)}, or supply a signature_callback."
        ) from None


def signing_key(consumer_secret: str, token_secret: str | None = None) -> str:
    """``enc(consumer_secret)&enc(token_secret)``, with an empty token secret when
    there is none."""
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"


def current_timestamp() -> int:
    """Seconds since the Unix epoch."""
    return int(time.time())


class RandomNonceGenerator(NonceGenerator):
    """SHA1 hex digest of the timestamp and 16 random bytes.

    Every call draws fresh entropy from ``os.urandom`` so concurrent signing shares
    no state.
    """

    def generate(self, request: Request, timestamp: int) -> str:
        return sha1(str(timestamp).encode("ascii") + os.urandom(16)).hexdigest()


class URLNonceGenerator(NonceGenerator):
    """SHA1 hex digest of the timestamp followed by the full request URL.

    Deterministic for a given request and timestamp. Two different requests to the
    same URL in the same second share a nonce, so prefer
    :py:class:`RandomNonceGenerator` outside of regression tests.
    """

    def generate(self, request: Request, timestamp: int) -> str:
        return sha1(f"{timestamp}{request.url}".encode()).hexdigest()


class StaticNonceGenerator(NonceGenerator):
    """Always returns the same nonce. Useful for test fixtures."""

    def __init__(self, nonce: str) -> None:
        self._nonce = nonce

    def generate(self, request: Request, timestamp: int) -> str:
        return self._nonce
