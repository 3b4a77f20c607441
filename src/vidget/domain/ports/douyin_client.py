"""Port for the Douyin platform I/O stages of the resolution pipeline."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DouyinClientPort(Protocol):
    """Async interface for the network-bound pipeline stages.

    Every method raises the matching ``ResolutionError`` subclass on failure
    and never returns partial data.
    """

    async def resolve_redirect(self, share_link: str) -> str:
        """Follow at most one redirect hop and return the target URL."""
        ...

    async def extract_item_id(self, resolved_url: str) -> str:
        """Extract the platform item id from a resolved URL (or its page)."""
        ...

    async def fetch_metadata(self, item_id: str) -> dict[str, Any]:
        """Return the raw item-info document for ``item_id``."""
        ...
