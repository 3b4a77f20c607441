"""Item id extraction from a resolved Douyin URL.

Priority order, first hit wins:
    1. ``/video/<digits>`` in the URL path
    2. ``item_id`` query parameter
    3. regex scan of the fetched HTML page
"""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

import httpx
import structlog

from vidget.domain.entities.media import ItemIdNotFound
from vidget.infrastructure.douyin.constants import (
    DEFAULT_PAGE_TIMEOUT,
    DESKTOP_USER_AGENT,
    page_headers,
)

log = structlog.get_logger(__name__)

_URL_PATH_RE = re.compile(r"/video/(\d+)")

# Scanned in order against the page body; later patterns are never tried
# once an earlier one matches.
HTML_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"video/(\d+)"),
    re.compile(r"itemId[\"':=]+(\d+)"),
    re.compile(r"\"itemId\"\s*:\s*\"(\d+)\""),
    re.compile(r"item_ids=(\d+)"),
    re.compile(r"awemeId[\"':=]+(\d+)"),
)


def extract_from_url(url: str) -> str | None:
    """Try the URL path first, then the ``item_id`` query parameter."""
    if "video/" in url:
        match = _URL_PATH_RE.search(url)
        if match:
            return match.group(1)

    try:
        query = parse_qs(urlparse(url).query)
    except ValueError:
        log.debug("item_id_url_unparsable", url=url)
        return None
    values = query.get("item_id")
    if values and values[0]:
        return values[0]
    return None


def extract_from_html(html: str) -> str | None:
    for pattern in HTML_ID_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


class ItemIdExtractor:
    """Extracts the Douyin item id, falling back to the video page HTML."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_PAGE_TIMEOUT,
        user_agent: str = DESKTOP_USER_AGENT,
    ) -> None:
        self._http = http_client
        self._timeout = timeout
        self._user_agent = user_agent

    async def extract(self, resolved_url: str) -> str:
        """Return the item id for ``resolved_url``.

        Raises:
            ItemIdNotFound: page unreachable or no pattern matched.
        """
        item_id = extract_from_url(resolved_url)
        if item_id:
            log.info("item_id_extracted", source="url", item_id=item_id)
            return item_id

        html = await self._fetch_page(resolved_url)
        item_id = extract_from_html(html)
        if item_id:
            log.info("item_id_extracted", source="html", item_id=item_id)
            return item_id

        log.warning("item_id_not_found", url=resolved_url)
        raise ItemIdNotFound(resolved_url, "no pattern matched the page")

    async def _fetch_page(self, url: str) -> str:
        try:
            resp = await self._http.get(
                url,
                headers=page_headers(self._user_agent),
                follow_redirects=True,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            log.warning("item_page_request_failed", url=url, error=str(exc))
            raise ItemIdNotFound(url, str(exc)) from exc

        if resp.status_code >= 400:
            log.warning("item_page_http_error", url=url, status=resp.status_code)
            raise ItemIdNotFound(url, f"HTTP {resp.status_code}")
        return resp.text
