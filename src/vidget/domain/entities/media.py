"""Domain entities for share-link resolution.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

PLATFORM_DOUYIN = "douyin"


@dataclass(frozen=True)
class MediaAsset:
    """A resolved video: direct watermark-free URL plus display metadata.

    Built once per successful resolution and never mutated afterwards.
    """

    item_id: str
    source_url: str  # URL after the redirect hop
    watermark_free_url: str
    cover_url: str = ""
    title: str = ""
    author: str = ""
    duration_seconds: float = 0.0


@dataclass(frozen=True)
class LinkCheck:
    """Outcome of classifying a URL against the platform allow-list."""

    is_valid: bool
    platform: str = PLATFORM_DOUYIN


@dataclass(frozen=True)
class VersionInfo:
    version: str
    build_time: str  # ISO-8601, UTC
    maintainer: str
    description: str


class ResolutionError(Exception):
    """Base error for the share-link resolution pipeline."""

    code = "resolution_error"


class InvalidShareLink(ResolutionError):
    """Input does not match any known platform domain."""

    code = "invalid_share_link"

    def __init__(self, share_link: str) -> None:
        super().__init__(f"Not a valid Douyin share link: {share_link!r}")
        self.share_link = share_link


class RedirectResolutionFailed(ResolutionError):
    """Short link could not be followed to its target."""

    code = "redirect_resolution_failed"

    def __init__(self, share_link: str, reason: str = "") -> None:
        message = f"Failed to resolve redirect for {share_link!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.share_link = share_link


class ItemIdNotFound(ResolutionError):
    """No item identifier in the URL, its query or the fetched page."""

    code = "item_id_not_found"

    def __init__(self, url: str, reason: str = "") -> None:
        message = f"No item id found for {url!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url


class MetadataFetchFailed(ResolutionError):
    """Item-info API call failed or returned no usable item."""

    code = "metadata_fetch_failed"

    def __init__(self, item_id: str, reason: str = "") -> None:
        message = f"Failed to fetch metadata for item {item_id!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.item_id = item_id


class WatermarkUrlNotFound(ResolutionError):
    """No extraction strategy (nor the fallback template) produced a URL."""

    code = "watermark_url_not_found"

    def __init__(self, item_id: str) -> None:
        super().__init__(f"No watermark-free URL for item {item_id!r}")
        self.item_id = item_id


class NoVideosResolved(ResolutionError):
    """Batch resolution where every link failed."""

    code = "no_videos_resolved"

    def __init__(self, count: int) -> None:
        super().__init__(f"None of the {count} share link(s) could be resolved")
        self.count = count
