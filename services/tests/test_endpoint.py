"""Tests for endpoint resolution."""

import pytest

from chatflow.endpoint import Endpoint, resolve_endpoint
from chatflow.errors import ApiErrorKind, InvalidEndpointError

DEFAULT = "https://api.flowiseai.com"


@pytest.mark.parametrize(
    "override,expected",
    [
        ("https://flowise.example.com", "https://flowise.example.com"),
        ("https://flowise.example.com/", "https://flowise.example.com"),
        ("https://flowise.example.com//", "https://flowise.example.com/"),
        ("http://localhost:3000/base/", "http://localhost:3000/base"),
    ],
    ids=["no-slash", "one-slash", "two-slashes", "path-prefix"],
)
def test_strips_at_most_one_trailing_slash(override, expected):
    """Only a single trailing slash is removed; the rest is untouched."""
    assert resolve_endpoint(override, DEFAULT).base_url == expected


@pytest.mark.parametrize("override", [None, ""], ids=["none", "empty"])
def test_falls_back_to_default(override):
    """A missing or empty override uses the deployment default."""
    assert resolve_endpoint(override, DEFAULT) == Endpoint(DEFAULT)


def test_default_is_normalized_too():
    assert resolve_endpoint(None, "https://flowise.revou.tech/").base_url == (
        "https://flowise.revou.tech"
    )


@pytest.mark.parametrize(
    "override",
    ["ftp://flowise.example.com", "flowise.example.com", "HTTPS://flowise.example.com", "/"],
)
def test_rejects_non_http_schemes(override):
    with pytest.raises(InvalidEndpointError) as exc_info:
        resolve_endpoint(override, DEFAULT)
    assert exc_info.value.kind is ApiErrorKind.INVALID_ENDPOINT
    assert exc_info.value.message == (
        "Invalid API endpoint. URL must start with http:// or https://"
    )


def test_invalid_default_without_override():
    with pytest.raises(InvalidEndpointError):
        resolve_endpoint(None, "")


def test_resolution_is_idempotent():
    first = resolve_endpoint("https://flowise.example.com/", DEFAULT)
    assert resolve_endpoint(first.base_url, DEFAULT) == first


def test_endpoint_url_joins_path():
    endpoint = Endpoint("https://flowise.example.com")
    assert endpoint.url("/api/v1/ping") == "https://flowise.example.com/api/v1/ping"
    assert str(endpoint) == "https://flowise.example.com"
