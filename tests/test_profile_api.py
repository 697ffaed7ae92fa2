# tests/test_profile_api.py

import pytest
from sqlalchemy import update

from antiresume.database import engine
from antiresume.models.profile import UserProfile
from antiresume.services.profile_repository import ProfileRepository


def _auth(user_id="user_1"):
    return {"X-User-Id": user_id}


def _claim(client, username, user_id="user_1", **extra):
    res = client.post("/api/username", json={"username": username, **extra}, headers=_auth(user_id))
    assert res.status_code == 200, res.text
    return res.json()["profile"]


@pytest.fixture
def count_public_fetches(monkeypatch):
    """Counts how often the public profile composite reaches the database."""
    calls = []
    original = ProfileRepository.get_public_profile

    def counting(self, username):
        calls.append(username)
        return original(self, username)

    monkeypatch.setattr(ProfileRepository, "get_public_profile", counting)
    return calls


def test_requires_user_header(client):
    assert client.get("/api/username").status_code == 401
    assert client.put("/api/socials", json={"website": "a.dev"}).status_code == 401


def test_claim_username_strips_at_and_sanitizes_links(client):
    profile = _claim(client, "  @alice ", website="alice.dev", twitter_handle=" alice ")
    assert profile["username"] == "alice"
    assert profile["website"] == "https://alice.dev"
    assert profile["twitter_handle"] == "alice"
    assert "clerk_user_id" not in profile


def test_claim_username_conflicts(client):
    _claim(client, "alice")
    res = client.post("/api/username", json={"username": "alice"}, headers=_auth("user_2"))
    assert res.status_code == 409

    res = client.post("/api/username", json={"username": "  @ "}, headers=_auth("user_2"))
    assert res.status_code == 400


def test_get_username_before_and_after_claim(client):
    assert client.get("/api/username", headers=_auth()).json() == {"profile": None}
    _claim(client, "alice")
    assert client.get("/api/username", headers=_auth()).json()["profile"]["username"] == "alice"


def test_public_profile_round_trip(client):
    _claim(client, "alice", linkedin="linkedin.com/in/alice")
    tweets = [
        {"tweet_link": "https://x.com/alice/status/1", "notes": "first"},
        {"tweet_link": "https://x.com/alice/status/2"},
    ]
    assert client.post("/api/resume", json={"tweets": tweets}, headers=_auth()).status_code == 200

    res = client.get("/api/profile/alice")
    assert res.status_code == 200
    profile = res.json()["profile"]
    assert profile["username"] == "alice"
    assert profile["linkedin"] == "https://linkedin.com/in/alice"
    assert [t["tweet_link"] for t in profile["tweets"]] == [t["tweet_link"] for t in tweets]
    assert profile["tweets"][1]["notes"] is None
    assert profile["resume_created_at"].endswith("Z")
    assert "clerk_user_id" not in profile


def test_public_profile_missing_and_blank(client):
    assert client.get("/api/profile/ghost").status_code == 404
    assert client.get("/api/profile/%20").status_code == 400


def test_public_profile_is_cached_between_requests(client, count_public_fetches):
    _claim(client, "alice")
    client.get("/api/profile/alice")
    client.get("/api/profile/alice")
    assert count_public_fetches == ["alice"]


def test_direct_db_write_stays_invisible_until_ttl(client, clock):
    # A write that bypasses the mutation handlers is only seen after expiry
    _claim(client, "alice")
    assert client.get("/api/profile/alice").json()["profile"]["website"] is None

    with engine.begin() as conn:
        conn.execute(update(UserProfile).values(website="https://sneaky.dev"))
    assert client.get("/api/profile/alice").json()["profile"]["website"] is None

    clock.advance(300)
    assert client.get("/api/profile/alice").json()["profile"]["website"] == "https://sneaky.dev"


def test_cached_not_found_is_cleared_when_username_is_claimed(client):
    assert client.get("/api/profile/alice").status_code == 404
    _claim(client, "alice")
    assert client.get("/api/profile/alice").status_code == 200


def test_resume_update_refreshes_public_profile(client, count_public_fetches):
    _claim(client, "alice")
    client.post("/api/resume", json={"tweets": [{"tweet_link": "https://x.com/a/status/1"}]}, headers=_auth())
    assert len(client.get("/api/profile/alice").json()["profile"]["tweets"]) == 1

    # Reorder + add: list order is the display order
    new_tweets = [
        {"tweet_link": "https://x.com/a/status/2", "notes": "moved up"},
        {"tweet_link": "https://x.com/a/status/1"},
    ]
    res = client.put("/api/resume", json={"tweets": new_tweets}, headers=_auth())
    assert res.status_code == 200

    tweets = client.get("/api/profile/alice").json()["profile"]["tweets"]
    assert [t["tweet_link"] for t in tweets] == ["https://x.com/a/status/2", "https://x.com/a/status/1"]
    assert count_public_fetches == ["alice", "alice"]


def test_rename_evicts_old_username(client):
    _claim(client, "alice")
    assert client.get("/api/profile/alice").status_code == 200

    res = client.put("/api/username", json={"username": "alice2"}, headers=_auth())
    assert res.status_code == 200
    assert client.get("/api/profile/alice").status_code == 404
    assert client.get("/api/profile/alice2").json()["profile"]["username"] == "alice2"


def test_change_username_rules(client):
    assert client.put("/api/username", json={"username": "x"}, headers=_auth()).status_code == 404
    _claim(client, "alice")
    _claim(client, "bob", user_id="user_2")
    assert client.put("/api/username", json={"username": "@alice"}, headers=_auth()).status_code == 400
    assert client.put("/api/username", json={"username": "bob"}, headers=_auth()).status_code == 409


def test_socials_update_invalidates_reads(client):
    assert client.get("/api/socials", headers=_auth()).json()["socials"] == {
        "linkedin": None, "twitter_handle": None, "ig_handle": None, "website": None,
    }
    _claim(client, "alice")
    client.get("/api/profile/alice")
    client.get("/api/socials", headers=_auth())

    res = client.put("/api/socials", json={"website": "alice.dev", "ig_handle": " alice_ig "}, headers=_auth())
    assert res.status_code == 200
    assert res.json()["socials"]["website"] == "https://alice.dev"

    assert client.get("/api/socials", headers=_auth()).json()["socials"]["ig_handle"] == "alice_ig"
    assert client.get("/api/profile/alice").json()["profile"]["website"] == "https://alice.dev"


def test_socials_and_wallets_require_fields_and_profile(client):
    assert client.put("/api/socials", json={"nope": 1}, headers=_auth()).status_code == 400
    assert client.put("/api/wallets", json={"evm_wallet_address": "0x1"}, headers=_auth()).status_code == 404


def test_wallets_round_trip(client):
    _claim(client, "alice")
    client.get("/api/wallets", headers=_auth())
    res = client.put("/api/wallets", json={"evm_wallet_address": " 0xabc ", "solana_wallet_address": ""}, headers=_auth())
    assert res.json()["wallets"] == {"evm_wallet_address": "0xabc", "solana_wallet_address": None}
    assert client.get("/api/wallets", headers=_auth()).json()["wallets"]["evm_wallet_address"] == "0xabc"
    assert client.get("/api/profile/alice").json()["profile"]["evm_wallet_address"] == "0xabc"


def test_email_update(client):
    assert client.get("/api/email", headers=_auth()).json() == {"email": None}
    _claim(client, "alice")
    assert client.put("/api/email", json={"email": "not-an-email"}, headers=_auth()).status_code == 400

    res = client.put("/api/email", json={"email": " alice@example.com "}, headers=_auth())
    assert res.status_code == 200
    assert client.get("/api/email", headers=_auth()).json() == {"email": "alice@example.com"}

    client.put("/api/email", json={"email": ""}, headers=_auth())
    assert client.get("/api/email", headers=_auth()).json() == {"email": None}


def test_resume_lifecycle(client):
    body = {"tweets": [{"tweet_link": "https://x.com/a/status/1"}]}
    assert client.post("/api/resume", json=body, headers=_auth()).status_code == 404

    _claim(client, "alice")
    assert client.get("/api/resume", headers=_auth()).json() == {"resume": None}
    assert client.put("/api/resume", json=body, headers=_auth()).status_code == 404
    assert client.post("/api/resume", json=body, headers=_auth()).status_code == 200
    assert client.post("/api/resume", json=body, headers=_auth()).status_code == 409
    assert client.get("/api/resume", headers=_auth()).json()["resume"]["tweets"][0]["tweet_link"] == body["tweets"][0]["tweet_link"]

    assert client.delete("/api/resume", headers=_auth()).status_code == 200
    assert client.get("/api/resume", headers=_auth()).json() == {"resume": None}
    assert client.get("/api/profile/alice").json()["profile"]["tweets"] == []


@pytest.mark.parametrize("body", [
    {},
    {"tweets": "nope"},
    {"tweets": [{"notes": "no link"}]},
    {"tweets": [{"tweet_link": "   "}]},
    {"tweets": [{"tweet_link": "https://example.com/post/1"}]},
    {"tweets": [{"tweet_link": "https://x.com/alice"}]},
])
def test_resume_schema_validation(client, body):
    _claim(client, "alice")
    res = client.post("/api/resume", json=body, headers=_auth())
    assert res.status_code == 400
    assert res.json()["validationErrors"]


def test_delete_profile_clears_everything(client):
    _claim(client, "alice")
    client.post("/api/resume", json={"tweets": [{"tweet_link": "https://x.com/a/status/1"}]}, headers=_auth())
    client.get("/api/profile/alice")
    client.get("/api/username", headers=_auth())

    assert client.delete("/api/username", headers=_auth()).status_code == 200
    assert client.get("/api/profile/alice").status_code == 404
    assert client.get("/api/username", headers=_auth()).json() == {"profile": None}
    assert client.delete("/api/username", headers=_auth()).status_code == 404


def test_backend_error_maps_to_500_and_is_not_cached(client, monkeypatch):
    from antiresume.services.errors import BackendError

    _claim(client, "alice")
    original = ProfileRepository.get_public_profile

    def broken(self, username):
        raise BackendError("database unreachable")

    monkeypatch.setattr(ProfileRepository, "get_public_profile", broken)
    assert client.get("/api/profile/alice").status_code == 500

    monkeypatch.setattr(ProfileRepository, "get_public_profile", original)
    assert client.get("/api/profile/alice").status_code == 200


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_resume_rejects_non_post_links(client):
    _claim(client, "alice")
    body = {"tweets": [
        {"tweet_link": "https://twitter.com/alice/status/7?s=20"},
        {"tweet_link": "https://instagram.com/p/abc"},
    ]}
    res = client.post("/api/resume", json=body, headers=_auth())
    assert res.status_code == 400
    assert res.json()["validationErrors"] == [
        "tweets[1].tweet_link is not a post URL: https://instagram.com/p/abc",
    ]
    assert client.get("/api/resume", headers=_auth()).json() == {"resume": None}
