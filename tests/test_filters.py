from __future__ import annotations

import pytest

from workspace_purge.filters import build_username_pattern, filter_by_pattern

DOMAIN = "chatgpt.nyc.mn"


def _users(*emails):
    return [{"primaryEmail": email, "id": str(index)} for index, email in enumerate(emails)]


def test_includes_eight_character_alphanumeric_usernames() -> None:
    users = _users("abc12345@chatgpt.nyc.mn", "ABCDEFGH@chatgpt.nyc.mn")
    assert filter_by_pattern(users, DOMAIN, 8) == users


@pytest.mark.parametrize(
    "email",
    [
        "abc12345@other.com",
        "abc12345@CHATGPT.NYC.MN",
        "abc12345@sub.chatgpt.nyc.mn",
        "abc1234@chatgpt.nyc.mn",
        "abc123456@chatgpt.nyc.mn",
        "abc-1234@chatgpt.nyc.mn",
        "abc-12345@chatgpt.nyc.mn",
        "abc_1234@chatgpt.nyc.mn",
        "abcdéfgh@chatgpt.nyc.mn",
        "abc12345\n@chatgpt.nyc.mn",
        "abc12345@chatgpt.nyc.mn@chatgpt.nyc.mn",
        "abc12345",
        "@chatgpt.nyc.mn",
    ],
)
def test_excludes_non_matching_emails(email: str) -> None:
    assert filter_by_pattern(_users(email), DOMAIN, 8) == []


def test_missing_or_empty_email_is_skipped_without_error() -> None:
    users = [
        {"id": "1"},
        {"primaryEmail": "", "id": "2"},
        {"primaryEmail": None, "id": "3"},
        {"primaryEmail": 12345678, "id": "4"},
        {"primaryEmail": "keepme01@chatgpt.nyc.mn", "id": "5"},
    ]
    assert filter_by_pattern(users, DOMAIN, 8) == [users[-1]]


def test_preserves_order_and_passes_records_through_unchanged() -> None:
    users = [
        {"primaryEmail": "zzzz9999@chatgpt.nyc.mn", "name": {"fullName": "Z"}},
        {"primaryEmail": "nope@chatgpt.nyc.mn"},
        {"primaryEmail": "aaaa0000@chatgpt.nyc.mn", "suspended": True},
    ]
    result = filter_by_pattern(users, DOMAIN, 8)
    assert result == [users[0], users[2]]
    assert result[0] is users[0]


def test_username_length_is_configurable() -> None:
    users = _users("abc@chatgpt.nyc.mn", "abc12345@chatgpt.nyc.mn", "a1b2c3d4e5@chatgpt.nyc.mn")
    assert [u["primaryEmail"] for u in filter_by_pattern(users, DOMAIN, 3)] == ["abc@chatgpt.nyc.mn"]
    assert [u["primaryEmail"] for u in filter_by_pattern(users, DOMAIN, 10)] == ["a1b2c3d4e5@chatgpt.nyc.mn"]


def test_repeated_passes_agree() -> None:
    users = _users("abc12345@chatgpt.nyc.mn", "x@chatgpt.nyc.mn", "abc12345@other.com")
    assert filter_by_pattern(users, DOMAIN, 8) == filter_by_pattern(list(users), DOMAIN, 8)


@pytest.mark.parametrize("length", [0, -1, True, "8"])
def test_rejects_invalid_username_length(length) -> None:
    with pytest.raises(ValueError):
        build_username_pattern(length)
