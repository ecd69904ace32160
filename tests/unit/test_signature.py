# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import re

import pytest
from freezegun import freeze_time
from oauth_signers import ConfigurationError, HTTPRequest
from oauth_signers.signature import (
    CallbackSignatureMethod,
    HMACSHA1SignatureMethod,
    PlaintextSignatureMethod,
    RandomNonceGenerator,
    StaticNonceGenerator,
    URLNonceGenerator,
    current_timestamp,
    resolve_signature_method,
    signing_key,
)

SHA1_HEX_RE = re.compile(r"^[0-9a-f]{40}$")


def test_hmac_sha1() -> None:
    method = HMACSHA1SignatureMethod()
    assert method.name == "HMAC-SHA1"
    message = "The quick brown fox jumps over the lazy dog"
    assert method.sign(message, "key") == "3nybhbi3iqa8ino29wqQcBydtNk="


def test_plaintext() -> None:
    method = PlaintextSignatureMethod()
    assert method.name == "PLAINTEXT"
    assert method.sign("ignored", "bar&dracula") == "bar&dracula"


def test_callback_receives_arguments() -> None:
    calls: list[tuple[str, str]] = []

    def callback(base_string: str, key: str) -> str:
        calls.append((base_string, key))
        return "signed"

    method = CallbackSignatureMethod(callback, name="RSA-SHA1")
    assert method.name == "RSA-SHA1"
    assert method.sign("base", "key") == "signed"
    assert calls == [("base", "key")]


def test_callback_bytes_result_is_base64_encoded() -> None:
    method = CallbackSignatureMethod(lambda base, key: b"\x00\x01", name="X")
    assert method.sign("base", "key") == "AAE="


@pytest.mark.parametrize(
    "name,expected",
    [
        ("HMAC-SHA1", HMACSHA1SignatureMethod),
        ("PLAINTEXT", PlaintextSignatureMethod),
    ],
)
def test_resolve_signature_method(name: str, expected: type) -> None:
    assert isinstance(resolve_signature_method(name), expected)


def test_resolve_unknown_signature_method() -> None:
    with pytest.raises(ConfigurationError, match="RSA-SHA1"):
        resolve_signature_method("RSA-SHA1")


def test_resolve_unknown_signature_method_with_callback() -> None:
    method = resolve_signature_method("RSA-SHA1", lambda base, key: "sig")
    assert isinstance(method, CallbackSignatureMethod)


@pytest.mark.parametrize(
    "consumer_secret,token_secret,expected",
    [
        ("bar", "dracula", "bar&dracula"),
        ("bar", None, "bar&"),
        ("bar", "", "bar&"),
        ("a&b", "c d", "a%26b&c%20d"),
    ],
)
def test_signing_key(
    consumer_secret: str, token_secret: str | None, expected: str
) -> None:
    assert signing_key(consumer_secret, token_secret) == expected


@freeze_time("2012-05-02 05:29:44")
def test_current_timestamp() -> None:
    assert current_timestamp() == 1335936584


class TestNonceGenerators:
    def test_url_nonce_is_reproducible(self) -> None:
        request = HTTPRequest.create("GET", "http://www.example.com")
        generator = URLNonceGenerator()
        assert (
            generator.generate(request, 1335936584)
            == "29f72fa5fc2893972060b28a0df8623c41cbb5d2"
        )
        assert generator.generate(request, 1335936584) == generator.generate(
            request, 1335936584
        )

    def test_url_nonce_includes_query(self) -> None:
        request = HTTPRequest.create(
            "POST", "http://www.test.com/path?a=b&c=d", form={"e": "f"}
        )
        assert (
            URLNonceGenerator().generate(request, 1327274290)
            == "22c3b010c30c17043c3d2dd3a7aa3ae6c5549b32"
        )

    def test_random_nonce(self) -> None:
        request = HTTPRequest.create("GET", "http://www.example.com")
        generator = RandomNonceGenerator()
        nonces = {generator.generate(request, 1335936584) for _ in range(100)}
        assert len(nonces) == 100
        assert all(SHA1_HEX_RE.match(nonce) for nonce in nonces)

    def test_static_nonce(self) -> None:
        request = HTTPRequest.create("GET", "http://www.example.com")
        assert StaticNonceGenerator("abc").generate(request, 1) == "abc"
