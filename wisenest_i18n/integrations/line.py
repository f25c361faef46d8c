"""
LINE login and share capability.

Callers receive a LineCapability chosen once at startup instead of probing for
an SDK at every call site. MockLineCapability serves development and tests;
LineApiCapability talks to the LINE Profile API with the access token of
the visitor making the request.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from wisenest_i18n.ai.providers import get_httpx_timeout
from wisenest_i18n.logger import get_logger

logger = get_logger(__name__)

LINE_PROFILE_URL = "https://api.line.me/v2/profile"
LINE_SHARE_URL = "https://line.me/R/share?text="
DEFAULT_SITE_URL = "https://localhost:5000"


@dataclass
class LineProfile:
    user_id: str
    display_name: Optional[str] = None
    picture_url: Optional[str] = None
    status_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "displayName": self.display_name,
            "pictureUrl": self.picture_url,
            "statusMessage": self.status_message,
        }


class LineCapability(ABC):
    """What the platform needs from LINE: who is logged in, and how to share."""

    name = "base"

    def __init__(self, site_url: str = DEFAULT_SITE_URL):
        self.site_url = site_url.rstrip("/")

    @abstractmethod
    def get_profile(self, access_token: Optional[str] = None) -> Optional[LineProfile]:
        """Return the profile behind a user's access token, or None when nobody is logged in."""

    def is_logged_in(self, access_token: Optional[str] = None) -> bool:
        return self.get_profile(access_token) is not None

    def activity_url(self, activity_id: str) -> str:
        return f"{self.site_url}/a/{activity_id}"

    def share_url(self, activity_id: str, title: str) -> str:
        """LINE share link carrying the activity title and its public URL."""
        return LINE_SHARE_URL + quote(f"{title}\n{self.activity_url(activity_id)}", safe="")


class MockLineCapability(LineCapability):
    """Fixed profile for development and tests; any token is accepted."""

    name = "mock"

    def __init__(self, profile: Optional[LineProfile] = None, site_url: str = DEFAULT_SITE_URL,
                 logged_in: bool = True):
        super().__init__(site_url)
        self.profile = profile or LineProfile(
            user_id="mock-line-user-id",
            display_name="Mock User",
            status_message="Welcome to WiseNest Marketing",
        )
        self.logged_in = logged_in

    def get_profile(self, access_token: Optional[str] = None) -> Optional[LineProfile]:
        return self.profile if self.logged_in else None


class LineApiCapability(LineCapability):
    """
    Profile lookups against api.line.me.

    The Profile API answers for the user who owns the access token, so every
    lookup takes the token of the current visitor (from LIFF or LINE Login).
    The channel token is kept for channel-level calls and is never sent here.
    """

    name = "line"

    def __init__(self, channel_token: str = "", site_url: str = DEFAULT_SITE_URL,
                 transport: Optional[httpx.BaseTransport] = None, timeout: Any = 10):
        super().__init__(site_url)
        self.channel_token = channel_token
        self.transport = transport
        self.timeout = timeout

    def get_profile(self, access_token: Optional[str] = None) -> Optional[LineProfile]:
        if not access_token:
            return None

        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            with httpx.Client(timeout=get_httpx_timeout(self.timeout), transport=self.transport) as client:
                response = client.get(LINE_PROFILE_URL, headers=headers)
                if response.status_code in (401, 403):
                    logger.info("LINE access token rejected; treating user as logged out")
                    return None
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to get LINE profile: {e}")
            return None

        return LineProfile(
            user_id=data.get("userId", ""),
            display_name=data.get("displayName"),
            picture_url=data.get("pictureUrl"),
            status_message=data.get("statusMessage"),
        )


def select_line_capability(config, transport: Optional[httpx.BaseTransport] = None) -> LineCapability:
    """Pick the LINE capability for this process from configuration."""
    token = getattr(config, "line_channel_token", "") or ""
    site_url = (getattr(config, "extra", None) or {}).get("site_url", DEFAULT_SITE_URL)
    if token:
        logger.info("LINE channel configured, using LINE API capability")
        return LineApiCapability(token, site_url=site_url, transport=transport)
    logger.info("LINE channel token not configured, using mock LINE capability")
    return MockLineCapability(site_url=site_url)
