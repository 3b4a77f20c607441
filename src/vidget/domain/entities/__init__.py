from .media import (
    PLATFORM_DOUYIN,
    InvalidShareLink,
    ItemIdNotFound,
    LinkCheck,
    MediaAsset,
    MetadataFetchFailed,
    NoVideosResolved,
    RedirectResolutionFailed,
    ResolutionError,
    VersionInfo,
    WatermarkUrlNotFound,
)

__all__ = [
    "PLATFORM_DOUYIN",
    "InvalidShareLink",
    "ItemIdNotFound",
    "LinkCheck",
    "MediaAsset",
    "MetadataFetchFailed",
    "NoVideosResolved",
    "RedirectResolutionFailed",
    "ResolutionError",
    "VersionInfo",
    "WatermarkUrlNotFound",
]
