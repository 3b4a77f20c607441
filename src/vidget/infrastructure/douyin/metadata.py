"""Item-info API client: item id -> raw metadata document."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from vidget.domain.entities.media import MetadataFetchFailed
from vidget.infrastructure.douyin.constants import (
    DEFAULT_METADATA_TIMEOUT,
    DESKTOP_USER_AGENT,
    ITEM_INFO_URL,
    api_headers,
)

log = structlog.get_logger(__name__)


class MetadataFetcher:
    """Calls ``/web/api/v2/aweme/iteminfo/`` and returns the first item.

    Always raises on failure; an empty ``item_list`` (private, deleted or
    region-blocked item) is a failure too.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_METADATA_TIMEOUT,
        user_agent: str = DESKTOP_USER_AGENT,
        endpoint: str = ITEM_INFO_URL,
    ) -> None:
        self._http = http_client
        self._timeout = timeout
        self._user_agent = user_agent
        self._endpoint = endpoint

    async def fetch(self, item_id: str) -> dict[str, Any]:
        try:
            resp = await self._http.get(
                self._endpoint,
                params={"item_ids": item_id},
                headers=api_headers(self._user_agent),
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            log.warning("metadata_request_failed", item_id=item_id, error=str(exc))
            raise MetadataFetchFailed(item_id, str(exc)) from exc

        if not 200 <= resp.status_code < 300:
            log.warning("metadata_http_error", item_id=item_id, status=resp.status_code)
            raise MetadataFetchFailed(item_id, f"HTTP {resp.status_code}")

        if not resp.content.strip():
            log.warning("metadata_empty_body", item_id=item_id)
            raise MetadataFetchFailed(item_id, "empty response body")

        try:
            data = resp.json()
        except ValueError as exc:
            log.warning("metadata_invalid_json", item_id=item_id)
            raise MetadataFetchFailed(item_id, "malformed JSON body") from exc

        items = data.get("item_list") if isinstance(data, dict) else None
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            log.warning("metadata_no_items", item_id=item_id)
            raise MetadataFetchFailed(item_id, "item_list is empty")

        log.info("metadata_fetched", item_id=item_id)
        return items[0]
