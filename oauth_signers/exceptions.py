# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0


class BaseOAuthException(Exception):
    """Top-level exception to capture signing and client related errors."""


class ConfigurationError(BaseOAuthException, ValueError):
    """Raised when a signer, transport, or service is configured with invalid
    values, such as missing consumer credentials or an unsupported signature
    method."""


class OAuthHTTPError(BaseOAuthException):
    """Base exception type for all exceptions raised in HTTP clients."""
