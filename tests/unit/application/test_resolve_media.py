"""Tests for ResolveMediaUseCase."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest

from vidget.application.use_cases.resolve_media import ResolveMediaUseCase
from vidget.domain.entities.media import (
    InvalidShareLink,
    MediaAsset,
    MetadataFetchFailed,
    NoVideosResolved,
    RedirectResolutionFailed,
    WatermarkUrlNotFound,
)
from vidget.infrastructure.douyin import (
    build_fallback_url,
    classify,
    resolve_watermark_free_url,
)
from vidget.infrastructure.douyin.document import display_fields
from vidget.infrastructure.persistence.media_asset_cache import (
    CacheMediaAssetRepository,
)

_LINK = "https://v.douyin.com/iRNBho6u/"
_OTHER_LINK = "https://v.douyin.com/ZZZZ9999/"
_MALFORMED = "https://example.com/not-douyin"


def _make_uc(
    client: AsyncMock,
    repository: CacheMediaAssetRepository,
    *,
    fallback: bool = True,
    max_concurrent: int = 5,
) -> ResolveMediaUseCase:
    return ResolveMediaUseCase(
        client=client,
        repository=repository,
        classify_fn=classify,
        watermark_fn=resolve_watermark_free_url,
        fallback_fn=build_fallback_url if fallback else None,
        display_fields_fn=display_fields,
        max_concurrent=max_concurrent,
    )


def _item_without_urls() -> dict[str, Any]:
    return {
        "aweme_id": "7300000000000000009",
        "desc": "no playable variants",
        "video": {"duration": 1000, "play_addr": {"uri": "", "url_list": []}},
    }


class TestResolveOne:
    async def test_runs_pipeline_in_order(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        asset = await uc.resolve_one(_LINK)

        assert asset == media_asset
        mock_douyin_client.resolve_redirect.assert_awaited_once_with(_LINK)
        mock_douyin_client.extract_item_id.assert_awaited_once_with(
            media_asset.source_url
        )
        mock_douyin_client.fetch_metadata.assert_awaited_once_with(
            media_asset.item_id
        )

    async def test_result_is_cached(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        first = await uc.resolve_one(_LINK)
        second = await uc.resolve_one(_LINK)

        assert first == second
        assert mock_douyin_client.resolve_redirect.await_count == 1
        assert await media_asset_repo.get(_LINK) == first

    async def test_cache_hit_skips_validation_and_network(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        await media_asset_repo.save(_LINK, media_asset)
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        assert await uc.resolve_one(_LINK) == media_asset
        mock_douyin_client.resolve_redirect.assert_not_awaited()

    async def test_invalid_link_fails_before_network(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        with pytest.raises(InvalidShareLink):
            await uc.resolve_one(_MALFORMED)

        mock_douyin_client.resolve_redirect.assert_not_awaited()
        mock_douyin_client.extract_item_id.assert_not_awaited()
        mock_douyin_client.fetch_metadata.assert_not_awaited()

    async def test_stage_error_propagates_and_nothing_is_cached(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        mock_douyin_client.fetch_metadata.side_effect = MetadataFetchFailed(
            "7300000000000000001", "HTTP 500"
        )
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        with pytest.raises(MetadataFetchFailed):
            await uc.resolve_one(_LINK)

        assert await media_asset_repo.get(_LINK) is None

    async def test_failure_is_retried_on_next_call(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        mock_douyin_client.resolve_redirect.side_effect = [
            RedirectResolutionFailed(_LINK, "HTTP 503"),
            media_asset.source_url,
        ]
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        with pytest.raises(RedirectResolutionFailed):
            await uc.resolve_one(_LINK)
        assert await uc.resolve_one(_LINK) == media_asset

    async def test_fallback_url_when_strategies_fail(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        mock_douyin_client.fetch_metadata.return_value = _item_without_urls()
        uc = _make_uc(mock_douyin_client, media_asset_repo, fallback=True)

        asset = await uc.resolve_one(_LINK)

        assert "video_id=7300000000000000001" in asset.watermark_free_url
        assert asset.title == "no playable variants"
        assert asset.duration_seconds == 1.0

    async def test_no_fallback_raises_watermark_not_found(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        mock_douyin_client.fetch_metadata.return_value = _item_without_urls()
        uc = _make_uc(mock_douyin_client, media_asset_repo, fallback=False)

        with pytest.raises(WatermarkUrlNotFound) as exc_info:
            await uc.resolve_one(_LINK)

        assert exc_info.value.item_id == "7300000000000000001"
        assert await media_asset_repo.get(_LINK) is None


class TestSingleFlight:
    async def test_concurrent_calls_share_one_pipeline_run(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        release = asyncio.Event()

        async def slow_redirect(link: str) -> str:
            await release.wait()
            return media_asset.source_url

        mock_douyin_client.resolve_redirect.side_effect = slow_redirect
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        waiters = [asyncio.create_task(uc.resolve_one(_LINK)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters)

        assert results == [media_asset] * 3
        assert mock_douyin_client.resolve_redirect.await_count == 1
        assert mock_douyin_client.fetch_metadata.await_count == 1

    async def test_concurrent_waiters_share_the_failure(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        release = asyncio.Event()

        async def failing_redirect(link: str) -> str:
            await release.wait()
            raise RedirectResolutionFailed(link, "HTTP 500")

        mock_douyin_client.resolve_redirect.side_effect = failing_redirect
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        waiters = [asyncio.create_task(uc.resolve_one(_LINK)) for _ in range(2)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert all(isinstance(r, RedirectResolutionFailed) for r in results)
        assert mock_douyin_client.resolve_redirect.await_count == 1

    async def test_cancelled_waiter_does_not_cancel_shared_run(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        release = asyncio.Event()

        async def slow_redirect(link: str) -> str:
            await release.wait()
            return media_asset.source_url

        mock_douyin_client.resolve_redirect.side_effect = slow_redirect
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        impatient = asyncio.create_task(uc.resolve_one(_LINK))
        patient = asyncio.create_task(uc.resolve_one(_LINK))
        await asyncio.sleep(0)
        impatient.cancel()
        release.set()

        assert await patient == media_asset
        with pytest.raises(asyncio.CancelledError):
            await impatient

    async def test_run_is_cancelled_when_last_waiter_times_out(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        cancelled = asyncio.Event()

        async def hanging_redirect(link: str) -> str:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return link

        mock_douyin_client.resolve_redirect.side_effect = hanging_redirect
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(uc.resolve_one(_LINK), 0.05)

        await asyncio.wait_for(cancelled.wait(), 1.0)
        assert uc._inflight == {}
        mock_douyin_client.fetch_metadata.assert_not_awaited()

    async def test_new_call_after_abandonment_starts_fresh_run(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        calls = 0

        async def first_call_hangs(link: str) -> str:
            nonlocal calls
            calls += 1
            if calls == 1:
                await asyncio.Event().wait()
            return media_asset.source_url

        mock_douyin_client.resolve_redirect.side_effect = first_call_hangs
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(uc.resolve_one(_LINK), 0.05)

        assert await uc.resolve_one(_LINK) == media_asset
        assert calls == 2

    async def test_aclose_cancels_inflight_runs(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def hanging_redirect(link: str) -> str:
            started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return link

        mock_douyin_client.resolve_redirect.side_effect = hanging_redirect
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        waiter = asyncio.create_task(uc.resolve_one(_LINK))
        await asyncio.wait_for(started.wait(), 1.0)
        await uc.aclose()

        assert cancelled.is_set()
        with pytest.raises(asyncio.CancelledError):
            await waiter

    async def test_aclose_without_inflight_runs(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)
        await uc.aclose()
        mock_douyin_client.resolve_redirect.assert_not_awaited()

    async def test_distinct_links_run_independently(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        await asyncio.gather(uc.resolve_one(_LINK), uc.resolve_one(_OTHER_LINK))

        assert mock_douyin_client.resolve_redirect.await_count == 2


class TestResolveMany:
    async def test_drops_failing_links(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        assets = await uc.resolve_many([_LINK, _MALFORMED])

        assert assets == [media_asset]

    async def test_preserves_input_order(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        async def redirect(link: str) -> str:
            if link == _LINK:
                await asyncio.sleep(0.01)
                return "https://www.douyin.com/video/111"
            return "https://www.douyin.com/video/222"

        async def item_id(url: str) -> str:
            return url.rsplit("/", 1)[-1]

        mock_douyin_client.resolve_redirect.side_effect = redirect
        mock_douyin_client.extract_item_id.side_effect = item_id
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        assets = await uc.resolve_many([_LINK, _OTHER_LINK])

        assert [a.item_id for a in assets] == ["111", "222"]

    async def test_all_failing_raises_no_videos_resolved(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        with pytest.raises(NoVideosResolved) as exc_info:
            await uc.resolve_many([_MALFORMED, "https://example.org/also-bad"])

        assert exc_info.value.count == 2

    async def test_empty_batch_raises_no_videos_resolved(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        with pytest.raises(NoVideosResolved):
            await uc.resolve_many([])

    async def test_single_link_batch_propagates_its_error(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
    ) -> None:
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        with pytest.raises(InvalidShareLink):
            await uc.resolve_many([_MALFORMED])

    async def test_unexpected_error_is_dropped_from_batch(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        async def redirect(link: str) -> str:
            if link == _OTHER_LINK:
                raise RuntimeError("boom")
            return media_asset.source_url

        mock_douyin_client.resolve_redirect.side_effect = redirect
        uc = _make_uc(mock_douyin_client, media_asset_repo)

        assert await uc.resolve_many([_LINK, _OTHER_LINK]) == [media_asset]

    async def test_concurrency_is_bounded(
        self,
        mock_douyin_client: AsyncMock,
        media_asset_repo: CacheMediaAssetRepository,
        media_asset: MediaAsset,
    ) -> None:
        active = 0
        peak = 0

        async def redirect(link: str) -> str:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return media_asset.source_url

        mock_douyin_client.resolve_redirect.side_effect = redirect
        uc = _make_uc(mock_douyin_client, media_asset_repo, max_concurrent=2)

        links = [f"https://v.douyin.com/link{i}/" for i in range(6)]
        assets = await uc.resolve_many(links)

        assert len(assets) == 6
        assert peak <= 2
