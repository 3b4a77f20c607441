"""Typed view of ``app.state`` as filled in by the lifespan."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from vidget.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from vidget.application.use_cases import (
        CheckUrlUseCase,
        ResolveMediaUseCase,
        VersionUseCase,
    )
    from vidget.domain.ports import CachePort, DouyinClientPort, MediaAssetRepository


class AppState(State):
    """``config`` and ``ready`` exist from create_app(); the rest only
    between lifespan startup and shutdown. Route handlers read their use
    case from here via ``request.app.state``.
    """

    config: AppConfig
    ready: bool

    cache: CachePort
    http_client: httpx.AsyncClient
    douyin_client: DouyinClientPort
    media_asset_repo: MediaAssetRepository

    resolve_media_uc: ResolveMediaUseCase
    check_url_uc: CheckUrlUseCase
    version_uc: VersionUseCase
