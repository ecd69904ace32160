# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
import ssl
from typing import Any

import aiohttp
import pytest
from oauth_signers import ConfigurationError
from oauth_signers.transfer import (
    DEFAULT_CONNECT_TIMEOUT,
    TRANSFER_OPTION_HANDLERS,
    TransferOptions,
    TransferState,
    resolve_transfer_options,
)


def test_every_option_has_a_handler() -> None:
    options = TransferOptions()
    assert [name for name in options.__dataclass_fields__] == list(
        TRANSFER_OPTION_HANDLERS
    )


def test_defaults() -> None:
    kwargs = resolve_transfer_options()
    assert kwargs["timeout"] == aiohttp.ClientTimeout(
        total=None, connect=DEFAULT_CONNECT_TIMEOUT
    )
    assert kwargs["ssl"] is True
    assert "proxy" not in kwargs
    assert "headers" not in kwargs


def test_timeouts_and_proxy() -> None:
    kwargs = resolve_transfer_options(
        {"timeout": 30, "connect_timeout": 5, "proxy": "http://proxy.local:3128"}
    )
    assert kwargs["timeout"].total == 30
    assert kwargs["timeout"].connect == 5
    assert kwargs["proxy"] == "http://proxy.local:3128"


def test_accepts_transfer_options_instance() -> None:
    kwargs = resolve_transfer_options(TransferOptions(timeout=2.5))
    assert kwargs["timeout"].total == 2.5


def test_verify_disabled() -> None:
    assert resolve_transfer_options({"verify": False})["ssl"] is False


def test_verify_enabled() -> None:
    assert resolve_transfer_options({"verify": True})["ssl"] is True


def test_verify_with_ca_bundle(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[Any] = []
    context = ssl.create_default_context()

    def create_default_context(cafile: str | None = None) -> ssl.SSLContext:
        calls.append(cafile)
        return context

    monkeypatch.setattr(ssl, "create_default_context", create_default_context)
    kwargs = resolve_transfer_options({"verify": "/etc/certs/ca.pem"})
    assert kwargs["ssl"] is context
    assert calls == ["/etc/certs/ca.pem"]


@pytest.mark.parametrize(
    "options,expected",
    [
        ({"cert": "/c.pem"}, ("/c.pem", None, None)),
        ({"cert": ("/c.pem", "pw")}, ("/c.pem", None, "pw")),
        ({"cert": "/c.pem", "ssl_key": "/k.pem"}, ("/c.pem", "/k.pem", None)),
        (
            {"cert": "/c.pem", "ssl_key": ("/k.pem", "secret")},
            ("/c.pem", "/k.pem", "secret"),
        ),
    ],
)
def test_client_certificates(
    options: dict[str, Any], expected: tuple[str, str | None, str | None]
) -> None:
    state = TransferState()
    for name, value in TransferOptions.from_options(options).items():
        TRANSFER_OPTION_HANDLERS[name](state, value)
    assert (state.cert_file, state.key_file, state.key_password) == expected


def test_basic_auth() -> None:
    kwargs = resolve_transfer_options({"auth": ("user", "pass")})
    assert kwargs["headers"] == [("Authorization", "Basic dXNlcjpwYXNz")]
    assert "auth" not in kwargs


def test_explicit_basic_auth_scheme() -> None:
    kwargs = resolve_transfer_options({"auth": ("user", "pass", "Basic")})
    assert kwargs["headers"] == [("Authorization", "Basic dXNlcjpwYXNz")]


def test_basic_auth_username_cannot_contain_colon() -> None:
    with pytest.raises(ConfigurationError, match="cannot contain"):
        resolve_transfer_options({"auth": ("us:er", "pass")})



def test_unsupported_auth_scheme() -> None:
    with pytest.raises(ConfigurationError, match="Invalid authentication scheme"):
        resolve_transfer_options({"auth": ("user", "pass", "ntlm")})


def test_unknown_option() -> None:
    with pytest.raises(ConfigurationError, match="curl_options"):
        resolve_transfer_options({"curl_options": {}})


def test_items_skips_unset_options() -> None:
    options = TransferOptions(verify=False, timeout=1)
    assert options.items() == [("timeout", 1), ("verify", False)]
