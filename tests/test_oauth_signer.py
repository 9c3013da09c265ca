"""Tests for OAuth 1.0a parameter generation and HMAC-SHA1 signing."""

import base64
import hashlib
import hmac

import pytest

from adapters.oauth_signer import new_oauth_parameters, sign_request


def _expected(base_string: str, secret: str) -> str:
    digest = hmac.new(f"{secret}&".encode(), base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


class TestNewOAuthParameters:
    def test_contains_oauth_fields(self) -> None:
        params = new_oauth_parameters("ck_test")

        assert params["oauth_consumer_key"] == "ck_test"
        assert params["oauth_signature_method"] == "HMAC-SHA1"
        assert params["oauth_version"] == "1.0"
        assert params["oauth_timestamp"].isdigit()
        assert params["oauth_nonce"]

    def test_nonce_is_fresh_per_call(self) -> None:
        assert new_oauth_parameters("k")["oauth_nonce"] != new_oauth_parameters("k")["oauth_nonce"]


class TestSignRequest:
    def test_matches_hmac_sha1_over_base_string(self) -> None:
        signature = sign_request(
            "GET",
            "http://example.com/wp-json/gf/v2/forms",
            {"b": "2", "a": "1"},
            "secret",
        )

        base = "GET&http%3A%2F%2Fexample.com%2Fwp-json%2Fgf%2Fv2%2Fforms&a%3D1%26b%3D2"
        assert signature == _expected(base, "secret")

    def test_parameter_values_are_double_encoded_in_base_string(self) -> None:
        signature = sign_request("GET", "http://example.com/forms", {"c": "x y"}, "s3")

        base = "GET&http%3A%2F%2Fexample.com%2Fforms&c%3Dx%2520y"
        assert signature == _expected(base, "s3")

    def test_method_is_uppercased(self) -> None:
        url = "http://example.com/forms"
        assert sign_request("get", url, {}, "s") == sign_request("GET", url, {}, "s")

    def test_secret_changes_signature(self) -> None:
        url = "http://example.com/forms"
        assert sign_request("GET", url, {"a": "1"}, "one") != sign_request("GET", url, {"a": "1"}, "two")

    def test_signature_is_base64_sha1_digest(self) -> None:
        signature = sign_request("GET", "https://example.com/forms", {"a": "1"}, "s")
        assert len(base64.b64decode(signature)) == 20

    def test_url_without_scheme_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            sign_request("GET", "example.com/forms", {}, "s")
