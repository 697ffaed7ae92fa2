# antiresume/services/profile_queries.py

from .cache_keys import CacheTags, build_key
from .read_through import QueryDescriptor, QueryRegistry

registry = QueryRegistry()

PROFILE_BY_USER = registry.register(QueryDescriptor(
    name="profile-by-user",
    key_fn=lambda user_id: build_key("profile-by-user", user_id),
    tag_fn=lambda user_id: {CacheTags.profile(user_id)},
    fetch_fn=lambda repo, user_id: repo.get_profile_by_user(user_id),
))

PROFILE_ID_BY_USER = registry.register(QueryDescriptor(
    name="profile-id-by-user",
    key_fn=lambda user_id: build_key("profile-id-by-user", user_id),
    tag_fn=lambda user_id: {CacheTags.profile(user_id)},
    fetch_fn=lambda repo, user_id: repo.get_profile_id_by_user(user_id),
))

RESUME_BY_USER = registry.register(QueryDescriptor(
    name="resume-by-user",
    key_fn=lambda user_id: build_key("resume-by-user", user_id),
    tag_fn=lambda user_id: {CacheTags.resume(user_id), CacheTags.profile(user_id)},
    fetch_fn=lambda repo, user_id: repo.get_resume_by_user(user_id),
))

SOCIALS_BY_USER = registry.register(QueryDescriptor(
    name="socials-by-user",
    key_fn=lambda user_id: build_key("socials-by-user", user_id),
    tag_fn=lambda user_id: {CacheTags.socials(user_id), CacheTags.profile(user_id)},
    fetch_fn=lambda repo, user_id: repo.get_socials_by_user(user_id),
))

WALLETS_BY_USER = registry.register(QueryDescriptor(
    name="wallets-by-user",
    key_fn=lambda user_id: build_key("wallets-by-user", user_id),
    tag_fn=lambda user_id: {CacheTags.wallets(user_id), CacheTags.profile(user_id)},
    fetch_fn=lambda repo, user_id: repo.get_wallets_by_user(user_id),
))


def _public_profile_owner_tags(profile):
    # Ties the username-keyed entry to its owner, so profile/resume writes
    # and renames evict it without knowing the username
    user_id = profile["clerk_user_id"]
    return {CacheTags.profile(user_id), CacheTags.resume(user_id)}


PUBLIC_PROFILE_BY_USERNAME = registry.register(QueryDescriptor(
    name="public-profile-by-username",
    key_fn=lambda username: build_key("public-profile-by-username", username),
    tag_fn=lambda username: {CacheTags.public_profile(username)},
    fetch_fn=lambda repo, username: repo.get_public_profile(username),
    value_tag_fn=_public_profile_owner_tags,
))
