# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .http import Request


@runtime_checkable
class SignatureMethod(Protocol):
    """Computes the ``oauth_signature`` value for a signature base string."""

    name: str
    """The ``oauth_signature_method`` value, for example ``HMAC-SHA1``."""

    def sign(self, base_string: str, key: str) -> str:
        """Sign the base string.

        :param base_string: The signature base string of the request.
        :param key: The signing key, ``enc(consumer_secret)&enc(token_secret)``.
        :returns: The signature exactly as it is placed in the parameter set.
        """
        ...


@runtime_checkable
class SignatureCallback(Protocol):
    """A caller supplied signing function.

    A ``str`` return value is used verbatim as the signature. A ``bytes`` return
    value is treated as a raw digest and base64 encoded.
    """

    def __call__(self, base_string: str, key: str, /) -> str | bytes: ...


@runtime_checkable
class NonceGenerator(Protocol):
    """Produces the ``oauth_nonce`` value for a single signing operation."""

    def generate(self, request: Request, timestamp: int) -> str:
        """Generate a nonce for ``request`` signed at ``timestamp``."""
        ...
