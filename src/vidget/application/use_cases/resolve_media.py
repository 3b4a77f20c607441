"""Share-link resolution use case (the pipeline orchestrator)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

import structlog

from vidget.domain.entities.media import (
    InvalidShareLink,
    LinkCheck,
    MediaAsset,
    NoVideosResolved,
    ResolutionError,
    WatermarkUrlNotFound,
)
from vidget.domain.ports.douyin_client import DouyinClientPort
from vidget.domain.ports.media_asset_repository import MediaAssetRepository

log = structlog.get_logger(__name__)

WatermarkResolveFn = Callable[[dict[str, Any]], str]
FallbackUrlFn = Callable[[str, dict[str, Any]], str]
DisplayFieldsFn = Callable[[dict[str, Any]], dict[str, Any]]


class _Flight:
    """One in-flight pipeline run and the number of callers awaiting it."""

    __slots__ = ("task", "waiters")

    def __init__(self, task: asyncio.Task[MediaAsset]) -> None:
        self.task = task
        self.waiters = 0


class ResolveMediaUseCase:
    """Resolves Douyin share links into immutable ``MediaAsset`` values.

    Flow (single link):
        1. Cache lookup (hit short-circuits everything)
        2. Classify link (fail fast before any network call)
        3. Follow the short-link redirect
        4. Extract the item id
        5. Fetch item metadata
        6. Resolve the watermark-free URL (optionally synthesize a fallback)
        7. Build the asset, store it in the cache, return it

    Concurrent calls for the same share link share one in-flight pipeline
    run; every waiter gets the same asset or the same exception. When the
    last waiter is cancelled or times out, the run is cancelled with it.
    """

    def __init__(
        self,
        *,
        client: DouyinClientPort,
        repository: MediaAssetRepository,
        classify_fn: Callable[[str], LinkCheck],
        watermark_fn: WatermarkResolveFn,
        fallback_fn: FallbackUrlFn | None = None,
        display_fields_fn: DisplayFieldsFn,
        max_concurrent: int = 5,
    ) -> None:
        """Initialize use case with dependencies.

        Args:
            client: Network-bound pipeline stages.
            repository: Resolution cache keyed by share link.
            classify_fn: Domain allow-list check.
            watermark_fn: Ordered watermark-free URL strategies.
            fallback_fn: Best-effort URL synthesis when all strategies fail.
                ``None`` disables the fallback.
            display_fields_fn: Maps raw metadata to cover/title/author/duration.
            max_concurrent: Parallel pipeline runs during batch resolution.
        """
        self._client = client
        self._repository = repository
        self._classify = classify_fn
        self._watermark = watermark_fn
        self._fallback = fallback_fn
        self._display_fields = display_fields_fn
        self._batch_semaphore = asyncio.Semaphore(max_concurrent)
        self._inflight: dict[str, _Flight] = {}

    async def resolve_one(self, share_link: str) -> MediaAsset:
        """Resolve a single share link; any stage failure fails the call.

        Raises:
            ResolutionError: The specific subclass of the failing stage.
        """
        cached = await self._repository.get(share_link)
        if cached is not None:
            log.info("resolve_cache_hit", share_link=share_link)
            return cached

        if not self._classify(share_link).is_valid:
            log.warning("resolve_invalid_link", share_link=share_link)
            raise InvalidShareLink(share_link)

        flight = self._inflight.get(share_link)
        if flight is None:
            flight = _Flight(asyncio.create_task(self._run_pipeline(share_link)))
            self._inflight[share_link] = flight
            flight.task.add_done_callback(
                lambda done, key=share_link: self._forget_inflight(key, done)
            )
        else:
            log.debug("resolve_joined_inflight", share_link=share_link)

        # One waiter leaving must not cancel the run the others share;
        # the last one leaving does.
        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                log.info("resolve_abandoned", share_link=share_link)
                if self._inflight.get(share_link) is flight:
                    del self._inflight[share_link]
                flight.task.cancel()

    async def aclose(self) -> None:
        """Cancel in-flight pipeline runs and wait for them to unwind."""
        tasks = [flight.task for flight in self._inflight.values()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            log.info("resolve_inflight_cancelled", count=len(tasks))

    async def resolve_many(self, share_links: Sequence[str]) -> list[MediaAsset]:
        """Resolve links independently, keeping input order.

        Failing links are logged and dropped. A single-link batch re-raises
        its own error.

        Raises:
            NoVideosResolved: Every link failed (or the batch was empty).
        """
        if not share_links:
            raise NoVideosResolved(0)
        if len(share_links) == 1:
            return [await self.resolve_one(share_links[0])]

        results = await asyncio.gather(
            *(self._resolve_or_none(link) for link in share_links)
        )
        assets = [asset for asset in results if asset is not None]

        log.info(
            "resolve_batch_complete",
            requested=len(share_links),
            resolved=len(assets),
        )
        if not assets:
            raise NoVideosResolved(len(share_links))
        return assets

    async def _resolve_or_none(self, share_link: str) -> MediaAsset | None:
        async with self._batch_semaphore:
            try:
                return await self.resolve_one(share_link)
            except ResolutionError as e:
                log.warning(
                    "resolve_batch_item_failed",
                    share_link=share_link,
                    error=e.code,
                    detail=str(e),
                )
            except Exception:
                log.exception("resolve_batch_item_error", share_link=share_link)
        return None

    async def _run_pipeline(self, share_link: str) -> MediaAsset:
        log.info("resolve_started", share_link=share_link)

        resolved_url = await self._client.resolve_redirect(share_link)
        item_id = await self._client.extract_item_id(resolved_url)
        raw = await self._client.fetch_metadata(item_id)

        watermark_free_url = self._watermark(raw)
        if not watermark_free_url and self._fallback is not None:
            watermark_free_url = self._fallback(item_id, raw)
        if not watermark_free_url:
            raise WatermarkUrlNotFound(item_id)

        asset = MediaAsset(
            item_id=item_id,
            source_url=resolved_url,
            watermark_free_url=watermark_free_url,
            **self._display_fields(raw),
        )
        await self._repository.save(share_link, asset)

        log.info("resolve_success", share_link=share_link, item_id=item_id)
        return asset

    def _forget_inflight(self, share_link: str, task: asyncio.Task[MediaAsset]) -> None:
        flight = self._inflight.get(share_link)
        if flight is not None and flight.task is task:
            del self._inflight[share_link]
        if not task.cancelled():
            # marks the exception retrieved when every waiter has already left
            task.exception()
