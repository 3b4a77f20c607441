"""Shared test fixtures for the vidget test suite."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from vidget.domain.entities.media import MediaAsset
from vidget.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from vidget.infrastructure.persistence.media_asset_cache import (
    CacheMediaAssetRepository,
)

ITEM_ID = "7300000000000000001"
SHORT_LINK = "https://v.douyin.com/iRNBho6u/"
RESOLVED_URL = f"https://www.iesdouyin.com/share/video/{ITEM_ID}/?region=CN&mid=1"
PLAY_URL = (
    "https://aweme.snssdk.com/aweme/v1/playwm/"
    "?video_id=v0200fg10000abc&ratio=720p&line=0&watermark=1"
)

# ---------------------------------------------------------------------------
# Raw item-info documents
# ---------------------------------------------------------------------------


def make_item(**video: Any) -> dict[str, Any]:
    """Item-info document with display fields and the given ``video`` keys."""
    return {
        "aweme_id": ITEM_ID,
        "desc": "Sunset over the Bund #shanghai",
        "author": {"nickname": "river_walker"},
        "video": {
            "cover": {"url_list": ["https://p3.douyinpic.com/cover.jpeg"]},
            "duration": 15320,
            **video,
        },
    }


@pytest.fixture()
def douyin_item() -> dict[str, Any]:
    """Item-info document whose play address carries every watermark marker."""
    return make_item(
        play_addr={
            "uri": "v0200fg10000abc",
            "url_list": [
                "https://v26.douyinvod.com/low/playwm/?video_id=v0200fg10000abc",
                PLAY_URL,
            ],
        },
    )


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def media_asset() -> MediaAsset:
    """Fully populated MediaAsset."""
    return MediaAsset(
        item_id=ITEM_ID,
        source_url=RESOLVED_URL,
        watermark_free_url=(
            "https://api.amemv.com/aweme/v1/play/"
            "?video_id=v0200fg10000abc&line=0&watermark=0"
        ),
        cover_url="https://p3.douyinpic.com/cover.jpeg",
        title="Sunset over the Bund #shanghai",
        author="river_walker",
        duration_seconds=15.32,
    )


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.delete = AsyncMock(return_value=True)
    cache.exists = AsyncMock(return_value=False)
    return cache


@pytest.fixture()
def memory_cache() -> MemoryCacheAdapter:
    return MemoryCacheAdapter(ttl_seconds=60, max_entries=100)


@pytest.fixture()
def media_asset_repo(memory_cache: MemoryCacheAdapter) -> CacheMediaAssetRepository:
    return CacheMediaAssetRepository(cache=memory_cache, ttl_seconds=60)


@pytest.fixture()
def mock_douyin_client(douyin_item: dict[str, Any]) -> AsyncMock:
    """DouyinClientPort double that resolves every link to ``douyin_item``."""
    client = AsyncMock()
    client.resolve_redirect = AsyncMock(return_value=RESOLVED_URL)
    client.extract_item_id = AsyncMock(return_value=ITEM_ID)
    client.fetch_metadata = AsyncMock(return_value=douyin_item)
    return client
