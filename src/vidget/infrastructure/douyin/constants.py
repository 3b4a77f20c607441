"""Douyin endpoints and request headers.

The platform only answers these requests reliably with the exact header
values below.
"""

from __future__ import annotations

MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 13_2_3 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/13.0.3 "
    "Mobile/15E148 Safari/604.1"
)
DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)

HTML_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,"
    "image/avif,image/webp,*/*;q=0.8"
)
JSON_ACCEPT = "application/json, text/plain, */*"
ACCEPT_LANGUAGE = "zh-CN,zh;q=0.9,en;q=0.8"
REFERER = "https://www.douyin.com/"

SHORT_LINK_HOST = "v.douyin.com"
ITEM_INFO_URL = "https://www.iesdouyin.com/web/api/v2/aweme/iteminfo/"

# Legacy CDN host serving watermarked streams, and its clean counterpart
LEGACY_PLAY_HOST = "aweme.snssdk.com"
CLEAN_PLAY_HOST = "api.amemv.com"

FALLBACK_PLAY_TEMPLATE = (
    "https://aweme.snssdk.com/aweme/v1/play/?video_id={video_id}&ratio=720p&line=0"
)

DEFAULT_REDIRECT_TIMEOUT = 15.0
DEFAULT_PAGE_TIMEOUT = 15.0
DEFAULT_METADATA_TIMEOUT = 10.0


def redirect_headers(user_agent: str = MOBILE_USER_AGENT) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": HTML_ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
    }


def page_headers(user_agent: str = DESKTOP_USER_AGENT) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": HTML_ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
        "Referer": REFERER,
    }


def api_headers(user_agent: str = DESKTOP_USER_AGENT) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Referer": REFERER,
        "Accept": JSON_ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
    }
