"""Media asset repository backed by CachePort."""

from __future__ import annotations

import json

import structlog

from vidget.domain.entities.media import MediaAsset
from vidget.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_KEY_PREFIX = "douyin:video:"


def cache_key(share_link: str) -> str:
    """Share links are keyed verbatim."""
    return f"{_KEY_PREFIX}{share_link}"


def _serialize_asset(asset: MediaAsset) -> str:
    return json.dumps(
        {
            "item_id": asset.item_id,
            "source_url": asset.source_url,
            "watermark_free_url": asset.watermark_free_url,
            "cover_url": asset.cover_url,
            "title": asset.title,
            "author": asset.author,
            "duration_seconds": asset.duration_seconds,
        },
        ensure_ascii=False,
    )


def _deserialize_asset(data: str) -> MediaAsset:
    d = json.loads(data)
    return MediaAsset(
        item_id=d["item_id"],
        source_url=d["source_url"],
        watermark_free_url=d["watermark_free_url"],
        cover_url=d.get("cover_url", ""),
        title=d.get("title", ""),
        author=d.get("author", ""),
        duration_seconds=float(d.get("duration_seconds", 0.0)),
    )


class CacheMediaAssetRepository:
    """Stores resolved media assets via CachePort with a fixed TTL."""

    def __init__(self, cache: CachePort, ttl_seconds: int = 3600) -> None:
        self.cache = cache
        self.ttl = ttl_seconds

    async def save(self, share_link: str, asset: MediaAsset) -> None:
        await self.cache.set(cache_key(share_link), _serialize_asset(asset), ttl=self.ttl)
        log.debug("media_asset_saved", item_id=asset.item_id, ttl=self.ttl)

    async def get(self, share_link: str) -> MediaAsset | None:
        data = await self.cache.get(cache_key(share_link))
        if data is None:
            return None

        try:
            return _deserialize_asset(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error(
                "media_asset_deserialize_error",
                share_link=share_link,
                error=str(e),
            )
            return None
