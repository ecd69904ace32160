# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
from dataclasses import FrozenInstanceError

import pytest
from oauth_signers import ConfigurationError, SigningConfig
from oauth_signers.signature import (
    CallbackSignatureMethod,
    HMACSHA1SignatureMethod,
    PlaintextSignatureMethod,
    RandomNonceGenerator,
)


def test_defaults() -> None:
    config = SigningConfig(consumer_key="foo", consumer_secret="bar")
    assert config.version == "1.0"
    assert config.signature_method == "HMAC-SHA1"
    assert config.token is None
    assert config.token_secret is None
    assert config.disable_post_params is False
    assert config.realm is None
    assert dict(config.extra_params) == {}
    assert isinstance(config.method, HMACSHA1SignatureMethod)
    assert isinstance(config.nonce_generator, RandomNonceGenerator)


def test_is_immutable() -> None:
    config = SigningConfig(consumer_key="foo", consumer_secret="bar")
    with pytest.raises(FrozenInstanceError):
        config.token = "count"  # type: ignore[misc]


def test_secrets_are_not_in_repr() -> None:
    config = SigningConfig(
        consumer_key="foo", consumer_secret="bar", token="t", token_secret="dracula"
    )
    assert "bar" not in repr(config)
    assert "dracula" not in repr(config)
    assert "foo" in repr(config)


def test_credentials_are_required() -> None:
    with pytest.raises(ConfigurationError, match="are required"):
        SigningConfig()


@pytest.mark.parametrize(
    "consumer_key,consumer_secret", [("", "bar"), ("foo", ""), ("", "")]
)
def test_missing_credentials(consumer_key: str, consumer_secret: str) -> None:
    with pytest.raises(ConfigurationError, match="are required"):
        SigningConfig(consumer_key=consumer_key, consumer_secret=consumer_secret)


def test_unsupported_signature_method() -> None:
    with pytest.raises(ConfigurationError, match="RSA-SHA1"):
        SigningConfig(
            consumer_key="foo", consumer_secret="bar", signature_method="RSA-SHA1"
        )


def test_unsupported_signature_method_with_callback() -> None:
    config = SigningConfig(
        consumer_key="foo",
        consumer_secret="bar",
        signature_method="RSA-SHA1",
        signature_callback=lambda base_string, key: "signed",
    )
    assert isinstance(config.method, CallbackSignatureMethod)
    assert config.method.name == "RSA-SHA1"


def test_plaintext_method() -> None:
    config = SigningConfig(
        consumer_key="foo", consumer_secret="bar", signature_method="PLAINTEXT"
    )
    assert isinstance(config.method, PlaintextSignatureMethod)


def test_extra_params_must_be_protocol_params() -> None:
    with pytest.raises(ConfigurationError, match="session_handle"):
        SigningConfig(
            consumer_key="foo",
            consumer_secret="bar",
            extra_params={"session_handle": "x"},
        )


@pytest.mark.parametrize(
    "name",
    [
        "oauth_consumer_key",
        "oauth_nonce",
        "oauth_signature",
        "oauth_signature_method",
        "oauth_timestamp",
        "oauth_token",
        "oauth_version",
        "oauth_callback",
        "oauth_verifier",
    ],
)
def test_extra_params_cannot_replace_protocol_params(name: str) -> None:
    with pytest.raises(ConfigurationError, match="cannot be overridden"):
        SigningConfig(
            consumer_key="foo", consumer_secret="bar", extra_params={name: "x"}
        )


def test_extra_params_are_copied_and_read_only() -> None:
    params = {"oauth_session_handle": "x"}
    config = SigningConfig(
        consumer_key="foo", consumer_secret="bar", extra_params=params
    )
    params["oauth_session_handle"] = "changed"
    assert config.extra_params["oauth_session_handle"] == "x"
    with pytest.raises(TypeError):
        config.extra_params["oauth_other"] = "y"  # type: ignore[index]


class TestFromOptions:
    def test_from_options(self) -> None:
        config = SigningConfig.from_options(
            {
                "consumer_key": "foo",
                "consumer_secret": "bar",
                "token": "count",
                "token_secret": "dracula",
                "disable_post_params": True,
            }
        )
        assert config.token == "count"
        assert config.token_secret == "dracula"
        assert config.disable_post_params is True

    def test_unknown_options(self) -> None:
        with pytest.raises(ConfigurationError, match="consumerKey"):
            SigningConfig.from_options(
                {"consumerKey": "foo", "consumer_key": "foo", "consumer_secret": "bar"}
            )

    @pytest.mark.parametrize(
        "options",
        [{}, {"consumer_key": "foo"}, {"consumer_secret": "bar"}],
    )
    def test_missing_credentials(self, options: dict[str, str]) -> None:
        with pytest.raises(ConfigurationError, match="are required"):
            SigningConfig.from_options(options)
