"""Douyin link classifier: domain allow-list match, no network access."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from vidget.domain.entities.media import PLATFORM_DOUYIN, LinkCheck
from vidget.infrastructure.douyin.constants import SHORT_LINK_HOST

_DOUYIN_URL_RE = re.compile(
    r"^https?://(www\.)?(douyin\.com|iesdouyin\.com|v\.douyin\.com)/"
)


def classify(url: str) -> LinkCheck:
    """Check whether ``url`` is a plausible Douyin link.

    Never raises; anything that is not a matching string is invalid.
    """
    if not isinstance(url, str) or not url:
        return LinkCheck(is_valid=False, platform=PLATFORM_DOUYIN)
    return LinkCheck(
        is_valid=_DOUYIN_URL_RE.match(url) is not None,
        platform=PLATFORM_DOUYIN,
    )


def is_short_link(url: str) -> bool:
    """True for ``v.douyin.com`` links (``www.`` included) that need a redirect hop."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return False
    return host == SHORT_LINK_HOST or host.endswith(f".{SHORT_LINK_HOST}")
