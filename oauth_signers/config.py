# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any

from .exceptions import ConfigurationError
from .interfaces.signing import NonceGenerator, SignatureCallback, SignatureMethod
from .signature import HMAC_SHA1, RandomNonceGenerator, resolve_signature_method

OAUTH_VERSION = "1.0"

# Protocol parameters the signer computes or takes from dedicated fields.
RESERVED_PARAMS = frozenset(
    (
        "oauth_callback",
        "oauth_consumer_key",
        "oauth_nonce",
        "oauth_signature",
        "oauth_signature_method",
        "oauth_timestamp",
        "oauth_token",
        "oauth_verifier",
        "oauth_version",
    )
)


@dataclass(kw_only=True, frozen=True)
class SigningConfig:
    """Immutable per-client OAuth 1.0 signing configuration.

    A config is validated once at construction and may be shared by any number of
    concurrent signing operations.
    """

    consumer_key: str = ""
    """Identifies the calling application. Required."""

    consumer_secret: str = field(default="", repr=False)
    """Shared secret of the calling application. Required."""

    token: str | None = None
    """The user token. ``None`` or empty for consumer-only requests."""

    token_secret: str | None = field(default=None, repr=False)
    """Shared secret of the user token."""

    signature_method: str = HMAC_SHA1
    """Value of ``oauth_signature_method``."""

    version: str = OAUTH_VERSION
    """Value of ``oauth_version``. An empty value omits the parameter."""

    disable_post_params: bool = False
    """Never sign form body parameters when set."""

    signature_callback: SignatureCallback | None = None
    """Replaces the built-in signature computation. Called with
    ``(base_string, key)``."""

    callback: str | None = None
    """Value of ``oauth_callback``."""

    verifier: str | None = None
    """Value of ``oauth_verifier``."""

    realm: str | None = None
    """Optional ``realm`` for the ``Authorization`` header. It is never signed."""

    extra_params: Mapping[str, str] = field(default_factory=dict)
    """Additional ``oauth_*`` protocol parameters to sign and send. Names the signer
    sets itself are rejected, and empty values are neither signed nor sent."""

    nonce_generator: NonceGenerator = field(
        default_factory=RandomNonceGenerator, compare=False
    )
    """Strategy producing ``oauth_nonce`` values."""

    def __post_init__(self) -> None:
        if not self.consumer_key or not self.consumer_secret:
            raise ConfigurationError(
                "consumer_key and consumer_secret are required to sign requests."
            )
        for name in self.extra_params:
            if not name.startswith("oauth_"):
                raise ConfigurationError(
                    f"Extra protocol parameter {name!r} must start with 'oauth_'."
                )
            if name in RESERVED_PARAMS:
                raise ConfigurationError(
                    f"Extra protocol parameter {name!r} is set by the signer and "
                    "cannot be overridden."
                )
        object.__setattr__(
            self,
            "_signature_method",
            resolve_signature_method(self.signature_method, self.signature_callback),
        )
        object.__setattr__(
            self, "extra_params", MappingProxyType(dict(self.extra_params))
        )

    @property
    def method(self) -> SignatureMethod:
        """The resolved signature method strategy."""
        return self._signature_method  # type: ignore[attr-defined]

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "SigningConfig":
        """Create a config from the option mapping accepted by the client layer.

        Recognized options are the dataclass field names, for example
        ``consumer_key``, ``token_secret`` or ``disable_post_params``.

        :raises ConfigurationError: On unknown option names or invalid values.
        """
        known = {fld.name for fld in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown signing options: {', '.join(unknown)}."
            )
        return cls(**options)
