# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from urllib.parse import unquote

import pytest
from oauth_signers import (
    AsyncOAuth1Signer,
    HTTPRequest,
    Interceptor,
    OAuth1Interceptor,
    OAuth1Signer,
    SigningConfig,
    StaticNonceGenerator,
)

TIMESTAMP = 1327274290


def make_config() -> SigningConfig:
    return SigningConfig(
        consumer_key="foo",
        consumer_secret="bar",
        token="count",
        token_secret="dracula",
        nonce_generator=StaticNonceGenerator("abc"),
    )


def make_request() -> HTTPRequest:
    return HTTPRequest.create(
        "POST", "http://www.test.com/path?a=b&c=d", form={"e": "f"}
    )


@pytest.mark.asyncio
async def test_base_interceptor_hooks_are_passive() -> None:
    interceptor: Interceptor[HTTPRequest, None] = Interceptor()
    request = HTTPRequest.create("GET", "http://www.test.com/")
    await interceptor.read_before_transmit(request)
    assert await interceptor.modify_before_transmit(request) is request
    await interceptor.read_after_transmit(request, None)
    assert "Authorization" not in request.fields


@pytest.mark.asyncio
async def test_oauth1_interceptor_signs_request() -> None:
    config = make_config()
    interceptor: OAuth1Interceptor[None] = OAuth1Interceptor(
        AsyncOAuth1Signer(config), timestamp_provider=lambda: TIMESTAMP
    )
    request = make_request()

    signed = await interceptor.modify_before_transmit(request)

    assert signed is request
    authorization = request.fields["Authorization"].as_string()
    assert f'oauth_timestamp="{TIMESTAMP}"' in authorization
    assert 'oauth_nonce="abc"' in authorization

    expected = OAuth1Signer(config).signature(
        make_request(), timestamp=TIMESTAMP, nonce="abc"
    )
    signature = authorization.split('oauth_signature="', 1)[1].split('"', 1)[0]
    assert unquote(signature) == expected


@pytest.mark.asyncio
async def test_oauth1_interceptor_defaults_to_current_time() -> None:
    interceptor: OAuth1Interceptor[None] = OAuth1Interceptor(
        AsyncOAuth1Signer(make_config())
    )
    request = HTTPRequest.create("GET", "http://www.test.com/")
    await interceptor.modify_before_transmit(request)
    assert "oauth_timestamp=" in request.fields["Authorization"].as_string()
