"""Port for resolved media asset persistence."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vidget.domain.entities.media import MediaAsset


@runtime_checkable
class MediaAssetRepository(Protocol):
    """Async interface for caching resolved assets keyed by share link."""

    async def save(self, share_link: str, asset: MediaAsset) -> None: ...

    async def get(self, share_link: str) -> MediaAsset | None: ...
