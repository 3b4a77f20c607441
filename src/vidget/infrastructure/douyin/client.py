"""Douyin platform client: the network-bound stages behind one object."""

from __future__ import annotations

from typing import Any

import httpx

from vidget.infrastructure.douyin.constants import (
    DEFAULT_METADATA_TIMEOUT,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_REDIRECT_TIMEOUT,
    DESKTOP_USER_AGENT,
    MOBILE_USER_AGENT,
)
from vidget.infrastructure.douyin.item_id import ItemIdExtractor
from vidget.infrastructure.douyin.metadata import MetadataFetcher
from vidget.infrastructure.douyin.redirect import RedirectResolver


class DouyinClient:
    """Implements ``DouyinClientPort`` over a shared ``httpx.AsyncClient``.

    Stateless between calls; the HTTP client's lifecycle belongs to the
    composition root.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        redirect_timeout: float = DEFAULT_REDIRECT_TIMEOUT,
        page_timeout: float = DEFAULT_PAGE_TIMEOUT,
        metadata_timeout: float = DEFAULT_METADATA_TIMEOUT,
        mobile_user_agent: str = MOBILE_USER_AGENT,
        desktop_user_agent: str = DESKTOP_USER_AGENT,
    ) -> None:
        self._redirects = RedirectResolver(
            http_client, timeout=redirect_timeout, user_agent=mobile_user_agent
        )
        self._item_ids = ItemIdExtractor(
            http_client, timeout=page_timeout, user_agent=desktop_user_agent
        )
        self._metadata = MetadataFetcher(
            http_client, timeout=metadata_timeout, user_agent=desktop_user_agent
        )

    async def resolve_redirect(self, share_link: str) -> str:
        return await self._redirects.resolve(share_link)

    async def extract_item_id(self, resolved_url: str) -> str:
        return await self._item_ids.extract(resolved_url)

    async def fetch_metadata(self, item_id: str) -> dict[str, Any]:
        return await self._metadata.fetch(item_id)
