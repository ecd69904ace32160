# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""OAuth Signers provides OAuth 1.0 request signing, along with the request model,
interceptor hook, and aiohttp transport needed to send signed requests."""

from __future__ import annotations

from ._http import Field, Fields, HTTPRequest, QueryParams, URI
from .config import SigningConfig
from .exceptions import BaseOAuthException, ConfigurationError, OAuthHTTPError
from .interceptors import Interceptor, OAuth1Interceptor
from .signature import (
    HMACSHA1SignatureMethod,
    PlaintextSignatureMethod,
    RandomNonceGenerator,
    StaticNonceGenerator,
    URLNonceGenerator,
)
from .signers import AsyncOAuth1Signer, OAuth1Signer

__license__ = "Apache-2.0"
__version__ = "0.1.0"

__all__ = (
    "URI",
    "AsyncOAuth1Signer",
    "BaseOAuthException",
    "ConfigurationError",
    "Field",
    "Fields",
    "HMACSHA1SignatureMethod",
    "HTTPRequest",
    "Interceptor",
    "OAuth1Interceptor",
    "OAuth1Signer",
    "OAuthHTTPError",
    "PlaintextSignatureMethod",
    "QueryParams",
    "RandomNonceGenerator",
    "SigningConfig",
    "StaticNonceGenerator",
    "URLNonceGenerator",
)
