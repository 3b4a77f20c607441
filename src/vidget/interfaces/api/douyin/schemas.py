"""Request/response bodies for the Douyin endpoints (camelCase on the wire)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vidget.domain.entities.media import LinkCheck, MediaAsset, VersionInfo


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ParseVideoRequest(_CamelModel):
    share_url: str = Field(min_length=1, description="Douyin share link.")


class BatchParseVideoRequest(_CamelModel):
    share_urls: list[str] = Field(min_length=1, description="Douyin share links.")


class CheckUrlRequest(_CamelModel):
    url: str = Field(min_length=1)


class VideoInfoResponse(_CamelModel):
    video_url: str
    cover_url: str
    title: str
    author: str
    duration: float  # seconds

    @classmethod
    def from_asset(cls, asset: MediaAsset) -> VideoInfoResponse:
        return cls(
            video_url=asset.watermark_free_url,
            cover_url=asset.cover_url,
            title=asset.title,
            author=asset.author,
            duration=asset.duration_seconds,
        )


class BatchVideoInfoResponse(_CamelModel):
    videos: list[VideoInfoResponse]


class CheckUrlResponse(_CamelModel):
    is_valid: bool
    platform: str

    @classmethod
    def from_check(cls, check: LinkCheck) -> CheckUrlResponse:
        return cls(is_valid=check.is_valid, platform=check.platform)


class VersionResponse(_CamelModel):
    version: str
    build_time: str
    maintainer: str
    description: str

    @classmethod
    def from_info(cls, info: VersionInfo) -> VersionResponse:
        return cls(
            version=info.version,
            build_time=info.build_time,
            maintainer=info.maintainer,
            description=info.description,
        )
