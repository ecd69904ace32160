# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""Translation of transport-neutral transfer options into aiohttp request arguments.

Each supported option name maps to exactly one handler in
:py:data:`TRANSFER_OPTION_HANDLERS`. Handlers fold their option into a
:py:class:`TransferState`, which is rendered into keyword arguments for
``aiohttp.ClientSession.request`` once every option has been applied.
"""

import base64
import logging
import ssl
from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from typing import Any

import aiohttp

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT: float = 150

type KeyMaterial = str | tuple[str, str]
type Credentials = tuple[str, str] | tuple[str, str, str]


@dataclass(kw_only=True, frozen=True)
class TransferOptions:
    """Per-request transport options.

    :param proxy: Proxy URL to send the request through.
    :param timeout: Total time in seconds allowed for the request.
    :param connect_timeout: Time in seconds allowed to establish a connection.
    :param verify: ``True`` to verify TLS peers with the default trust store,
        ``False`` to disable verification, or a path to a CA bundle.
    :param cert: Client certificate path, or ``(path, password)``.
    :param ssl_key: Private key path, or ``(path, password)``.
    :param auth: ``(username, password)`` or ``(username, password, scheme)``.
    """

    proxy: str | None = None
    timeout: float | None = None
    connect_timeout: float | None = None
    verify: bool | str | None = None
    cert: KeyMaterial | None = None
    ssl_key: KeyMaterial | None = None
    auth: Credentials | None = None

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "TransferOptions":
        unknown = sorted(set(options) - set(TRANSFER_OPTION_HANDLERS))
        if unknown:
            raise ConfigurationError(f"Unknown transfer options: {', '.join(unknown)}.")
        return cls(**options)

    def items(self) -> list[tuple[str, Any]]:
        """The options that were set, in declaration order."""
        return [
            (fld.name, getattr(self, fld.name))
            for fld in fields(self)
            if getattr(self, fld.name) is not None
        ]


@dataclass(kw_only=True)
class TransferState:
    """Mutable accumulator the option handlers write into."""

    proxy: str | None = None
    total_timeout: float | None = None
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    verify_peer: bool = True
    ca_bundle: str | None = None
    cert_file: str | None = None
    key_file: str | None = None
    key_password: str | None = None
    authorization: str | None = None

    def to_request_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "timeout": aiohttp.ClientTimeout(
                total=self.total_timeout, connect=self.connect_timeout
            ),
            "ssl": self._ssl(),
        }
        if self.proxy is not None:
            kwargs["proxy"] = self.proxy
        if self.authorization is not None:
            kwargs["headers"] = [("Authorization", self.authorization)]
        return kwargs

    def _ssl(self) -> bool | ssl.SSLContext:
        if not self.verify_peer and self.cert_file is None:
            return False
        if self.ca_bundle is None and self.cert_file is None:
            return True

        context = ssl.create_default_context(cafile=self.ca_bundle)
        if not self.verify_peer:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        if self.cert_file is not None:
            context.load_cert_chain(
                self.cert_file, keyfile=self.key_file, password=self.key_password
            )
        return context


def _apply_proxy(state: TransferState, value: str) -> None:
    state.proxy = value


def _apply_timeout(state: TransferState, value: float) -> None:
    state.total_timeout = value


def _apply_connect_timeout(state: TransferState, value: float) -> None:
    state.connect_timeout = value


def _apply_verify(state: TransferState, value: bool | str) -> None:
    if value is False:
        state.verify_peer = False
        state.ca_bundle = None
        return
    state.verify_peer = True
    if isinstance(value, str):
        state.ca_bundle = value


def _apply_cert(state: TransferState, value: KeyMaterial) -> None:
    if isinstance(value, tuple):
        state.cert_file, password = value
        state.key_password = state.key_password or password
    else:
        state.cert_file = value


def _apply_ssl_key(state: TransferState, value: KeyMaterial) -> None:
    if isinstance(value, tuple):
        state.key_file, state.key_password = value
    else:
        state.key_file = value


def _apply_auth(state: TransferState, value: Credentials) -> None:
    scheme = value[2].lower() if len(value) > 2 else "basic"
    if scheme != "basic":
        raise ConfigurationError(f"Invalid authentication scheme: {scheme}")
    username, password = value[0], value[1]
    if ":" in username:
        raise ConfigurationError("Basic auth usernames cannot contain ':'")
    credentials = base64.b64encode(f"{username}:{password}".encode("latin1"))
    state.authorization = f"Basic {credentials.decode('ascii')}"


type TransferOptionHandler = Callable[[TransferState, Any], None]

TRANSFER_OPTION_HANDLERS: dict[str, TransferOptionHandler] = {
    "proxy": _apply_proxy,
    "timeout": _apply_timeout,
    "connect_timeout": _apply_connect_timeout,
    "verify": _apply_verify,
    "cert": _apply_cert,
    "ssl_key": _apply_ssl_key,
    "auth": _apply_auth,
}


def resolve_transfer_options(
    options: TransferOptions | Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Fold transfer options into ``aiohttp.ClientSession.request`` keyword
    arguments.

    :raises ConfigurationError: For unknown option names or unsupported values.
    """
    if options is None:
        options = TransferOptions()
    elif not isinstance(options, TransferOptions):
        options = TransferOptions.from_options(options)

    state = TransferState()
    for name, value in options.items():
        logger.debug("Applying transfer option %s", name)
        TRANSFER_OPTION_HANDLERS[name](state, value)
    return state.to_request_kwargs()
