"""Tests for the network allow-list."""

from chatflow.allowlist import NetworkAllowList


def test_exact_and_subdomain_matches():
    allowlist = NetworkAllowList(["flowiseai.com", "flowise.revou.tech"])

    assert allowlist.allows_host("flowiseai.com")
    assert allowlist.allows_host("api.flowiseai.com")
    assert allowlist.allows_host("FLOWISE.REVOU.TECH")
    assert not allowlist.allows_host("notflowiseai.com")
    assert not allowlist.allows_host("revou.tech")


def test_allows_url():
    allowlist = NetworkAllowList(["flowiseai.com"])

    assert allowlist.allows_url("https://api.flowiseai.com:443/api/v1/ping")
    assert not allowlist.allows_url("https://flowiseai.com.evil.io/")
    assert not allowlist.allows_url("not a url")


def test_empty_allowlist_is_falsy():
    assert not NetworkAllowList([])
    assert not NetworkAllowList(["", "  "])
    assert NetworkAllowList(["flowiseai.com"])
