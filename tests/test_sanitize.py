# tests/test_sanitize.py

import pytest

from antiresume.services.sanitize import (
    ensure_https_protocol,
    extract_tweet_id,
    normalize_username,
    sanitize_social_fields,
    sanitize_wallet_fields,
)


@pytest.mark.parametrize("raw,expected", [
    ("alice", "alice"),
    ("  @alice ", "alice"),
    ("@", None),
    ("   ", None),
    (None, None),
    (42, None),
])
def test_normalize_username(raw, expected):
    assert normalize_username(raw) == expected


def test_ensure_https_protocol():
    assert ensure_https_protocol("example.com") == "https://example.com"
    assert ensure_https_protocol("HTTP://example.com") == "HTTP://example.com"
    assert ensure_https_protocol(" https://x.io ") == "https://x.io"
    assert ensure_https_protocol("  ") == ""


def test_sanitize_social_fields_only_present_keys():
    result = sanitize_social_fields({
        "website": " mysite.dev ",
        "linkedin": "linkedin.com/in/alice",
        "twitter_handle": "  ",
        "username": "ignored",
    })
    assert result == {
        "website": "https://mysite.dev",
        "linkedin": "https://linkedin.com/in/alice",
        "twitter_handle": None,
    }


def test_handles_do_not_get_protocol():
    assert sanitize_social_fields({"ig_handle": "alice.ig"}) == {"ig_handle": "alice.ig"}


def test_sanitize_wallet_fields():
    assert sanitize_wallet_fields({"evm_wallet_address": " 0xabc ", "solana_wallet_address": 5}) == {
        "evm_wallet_address": "0xabc",
        "solana_wallet_address": None,
    }
    assert sanitize_wallet_fields({}) == {}


def test_extract_tweet_id():
    assert extract_tweet_id("https://x.com/alice/status/1234567890") == "1234567890"
    assert extract_tweet_id("https://twitter.com/bob_1/status/42?s=20") == "42"
    assert extract_tweet_id("https://instagram.com/p/abc") is None
    assert extract_tweet_id("") is None
