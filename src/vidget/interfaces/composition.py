"""Lifespan wiring: opens shared resources and builds the use cases on app.state."""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from vidget import __version__
from vidget.application.use_cases import (
    CheckUrlUseCase,
    ResolveMediaUseCase,
    VersionUseCase,
)
from vidget.infrastructure.cache.cache_factory import create_cache
from vidget.infrastructure.config import AppConfig
from vidget.infrastructure.douyin import (
    DouyinClient,
    build_fallback_url,
    classify,
    resolve_watermark_free_url,
)
from vidget.infrastructure.douyin.document import display_fields
from vidget.infrastructure.persistence.media_asset_cache import (
    CacheMediaAssetRepository,
)
from vidget.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def _douyin_client(config: AppConfig, http_client: httpx.AsyncClient) -> DouyinClient:
    return DouyinClient(
        http_client,
        redirect_timeout=config.http_redirect_timeout_seconds,
        page_timeout=config.http_page_timeout_seconds,
        metadata_timeout=config.http_metadata_timeout_seconds,
        mobile_user_agent=config.http_mobile_user_agent,
        desktop_user_agent=config.http_desktop_user_agent,
    )


def _install_use_cases(state: AppState, config: AppConfig) -> None:
    resolver = config.resolver
    state.resolve_media_uc = ResolveMediaUseCase(
        client=state.douyin_client,
        repository=state.media_asset_repo,
        classify_fn=classify,
        watermark_fn=resolve_watermark_free_url,
        fallback_fn=build_fallback_url if resolver.synthesize_fallback_url else None,
        display_fields_fn=display_fields,
        max_concurrent=resolver.max_concurrent,
    )
    state.check_url_uc = CheckUrlUseCase(classify_fn=classify)
    state.version_uc = VersionUseCase(
        version=__version__,
        maintainer="vidget maintainers",
        description="Douyin watermark-free video resolver API",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the cache and HTTP client, wire the Douyin pipeline, close on exit.

    Resources are entered on an exit stack, so shutdown releases them in
    reverse: in-flight resolutions are cancelled first, then the HTTP
    client closes, the cache last.
    """
    state = cast(AppState, app.state)
    config = state.config

    async with AsyncExitStack() as stack:
        state.cache = await stack.enter_async_context(
            create_cache(
                backend=config.cache.backend,
                ttl_seconds=config.cache.ttl_seconds,
                max_entries=config.cache.max_entries,
            )
        )

        stack.callback(log.info, "http_client_closed")
        # redirects are handled per request by each pipeline stage
        state.http_client = await stack.enter_async_context(
            httpx.AsyncClient(
                timeout=httpx.Timeout(config.http_page_timeout_seconds),
                follow_redirects=False,
            )
        )

        state.douyin_client = _douyin_client(config, state.http_client)
        state.media_asset_repo = CacheMediaAssetRepository(
            cache=state.cache, ttl_seconds=config.cache.ttl_seconds
        )
        _install_use_cases(state, config)
        stack.push_async_callback(state.resolve_media_uc.aclose)

        state.ready = True
        log.info(
            "app_startup_complete",
            cache_backend=config.cache.backend,
            fallback_url=config.resolver.synthesize_fallback_url,
        )
        try:
            yield
        finally:
            state.ready = False

    log.info("app_shutdown_complete")
