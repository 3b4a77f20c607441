"""Short-link redirect resolver.

Performs a single GET with redirect-following disabled and reads the
``Location`` header. Douyin's edge proxies sometimes answer with a 4xx
that still carries the redirect target, so the header is consulted on
error statuses too.
"""

from __future__ import annotations

import re

import httpx
import structlog

from vidget.domain.entities.media import RedirectResolutionFailed
from vidget.infrastructure.douyin.constants import (
    DEFAULT_REDIRECT_TIMEOUT,
    MOBILE_USER_AGENT,
    redirect_headers,
)
from vidget.infrastructure.douyin.link_classifier import is_short_link

log = structlog.get_logger(__name__)

# Item id followed by a non-digit with no "?", e.g. "/video/123region=CN"
# or "/video/123/".
_MISSING_QUERY_DELIM_RE = re.compile(r"/video/(\d+)(\D)")


def repair_redirect_target(location: str) -> str:
    """Insert the ``?`` the platform occasionally drops after the item id."""
    if "video/" not in location or "?" in location:
        return location
    match = _MISSING_QUERY_DELIM_RE.search(location)
    if match is None:
        return location
    item_id, next_char = match.group(1), match.group(2)
    repaired = (
        location[: match.start()]
        + f"/video/{item_id}?{next_char}"
        + location[match.end() :]
    )
    log.info("redirect_target_repaired", original=location, repaired=repaired)
    return repaired


class RedirectResolver:
    """Follows one redirect hop of a Douyin share link."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_REDIRECT_TIMEOUT,
        user_agent: str = MOBILE_USER_AGENT,
    ) -> None:
        self._http = http_client
        self._timeout = timeout
        self._user_agent = user_agent

    async def resolve(self, share_link: str) -> str:
        """Return the redirect target of ``share_link``.

        Non-short links are already final and are returned unchanged.

        Raises:
            RedirectResolutionFailed: transport error, or an error status
                without a ``Location`` header.
        """
        if not is_short_link(share_link):
            log.debug("redirect_not_needed", url=share_link)
            return share_link

        try:
            resp = await self._http.get(
                share_link,
                headers=redirect_headers(self._user_agent),
                follow_redirects=False,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            log.warning("redirect_request_failed", url=share_link, error=str(exc))
            raise RedirectResolutionFailed(share_link, str(exc)) from exc

        location = resp.headers.get("location")
        if location:
            log.info(
                "redirect_resolved",
                url=share_link,
                status=resp.status_code,
                location=location,
            )
            return repair_redirect_target(location)

        if 200 <= resp.status_code < 400:
            log.warning("redirect_location_missing", url=share_link)
            return share_link

        log.warning("redirect_http_error", url=share_link, status=resp.status_code)
        raise RedirectResolutionFailed(share_link, f"HTTP {resp.status_code}")
