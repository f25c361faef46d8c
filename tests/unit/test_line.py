"""Tests for the LINE profile and share capability."""

from urllib.parse import unquote

import httpx

from wisenest_i18n.config import TranslationConfig
from wisenest_i18n.integrations.line import (
    LINE_PROFILE_URL,
    LINE_SHARE_URL,
    LineApiCapability,
    LineProfile,
    MockLineCapability,
    select_line_capability,
)


def test_mock_profile():
    line = MockLineCapability()

    assert line.is_logged_in()
    assert line.get_profile("any-token").to_dict()["userId"] == "mock-line-user-id"
    assert not MockLineCapability(logged_in=False).is_logged_in()


def test_share_url_carries_title_and_activity_link():
    line = MockLineCapability(site_url="https://wisenest.example/")

    url = line.share_url("42", "限时优惠")

    assert url.startswith(LINE_SHARE_URL)
    assert unquote(url[len(LINE_SHARE_URL):]) == "限时优惠\nhttps://wisenest.example/a/42"


def test_api_profile():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"userId": "U1", "displayName": "Somchai"})

    line = LineApiCapability("channel-token", transport=httpx.MockTransport(handler))

    assert line.get_profile("user-token") == LineProfile(user_id="U1", display_name="Somchai")
    assert seen == {"url": LINE_PROFILE_URL, "auth": "Bearer user-token"}


def test_api_rejected_token_is_logged_out():
    line = LineApiCapability(transport=httpx.MockTransport(lambda request: httpx.Response(401)))

    assert line.get_profile("expired") is None
    assert not line.is_logged_in("expired")


def test_api_failures_are_logged_out():
    def unreachable(request):
        raise httpx.ConnectError("no route")

    assert LineApiCapability(transport=httpx.MockTransport(unreachable)).get_profile("t") is None
    server_error = httpx.MockTransport(lambda request: httpx.Response(500))
    assert LineApiCapability(transport=server_error).get_profile("t") is None


def test_selection_follows_configuration():
    assert select_line_capability(TranslationConfig()).name == "mock"

    config = TranslationConfig(line_channel_token="tok", extra={"site_url": "https://wisenest.example"})
    line = select_line_capability(config)

    assert line.name == "line"
    assert line.activity_url("7") == "https://wisenest.example/a/7"


def test_api_profile_never_sends_the_channel_token():
    seen = []

    def handler(request):
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json={"userId": "U1"})

    line = LineApiCapability("channel-token", transport=httpx.MockTransport(handler))

    assert line.get_profile() is None
    assert line.get_profile("") is None
    line.get_profile("visitor-token")
    assert seen == ["Bearer visitor-token"]
