"""Douyin parse / batch-parse / check-url / version endpoints."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from vidget.domain.entities.media import (
    InvalidShareLink,
    ItemIdNotFound,
    MetadataFetchFailed,
    NoVideosResolved,
    RedirectResolutionFailed,
    ResolutionError,
    WatermarkUrlNotFound,
)
from vidget.interfaces.api.douyin.schemas import (
    BatchParseVideoRequest,
    BatchVideoInfoResponse,
    CheckUrlRequest,
    CheckUrlResponse,
    ParseVideoRequest,
    VersionResponse,
    VideoInfoResponse,
)
from vidget.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/douyin", tags=["douyin"])

_STATUS_BY_ERROR: dict[type[ResolutionError], int] = {
    InvalidShareLink: 400,
    NoVideosResolved: 422,
    ItemIdNotFound: 404,
    WatermarkUrlNotFound: 404,
    RedirectResolutionFailed: 502,
    MetadataFetchFailed: 502,
}


def _error_response(exc: ResolutionError) -> JSONResponse:
    status = _STATUS_BY_ERROR.get(type(exc), 500)
    return JSONResponse(
        status_code=status,
        content={"error": exc.code, "detail": str(exc)},
    )


def _unexpected_error() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": "Unexpected resolver failure"},
    )


@router.post("/parse", response_model=VideoInfoResponse)
async def parse_video(
    request: Request, body: ParseVideoRequest
) -> VideoInfoResponse | JSONResponse:
    """Resolve one share link to a watermark-free video URL."""
    state = cast(AppState, request.app.state)
    try:
        asset = await state.resolve_media_uc.resolve_one(body.share_url)
    except ResolutionError as e:
        log.warning("parse_failed", share_url=body.share_url, error=e.code)
        return _error_response(e)
    except Exception:
        log.exception("parse_unhandled_error", share_url=body.share_url)
        return _unexpected_error()
    return VideoInfoResponse.from_asset(asset)


@router.post("/batch-parse", response_model=BatchVideoInfoResponse)
async def batch_parse_videos(
    request: Request, body: BatchParseVideoRequest
) -> BatchVideoInfoResponse | JSONResponse:
    """Resolve several share links; failing links are dropped."""
    state = cast(AppState, request.app.state)
    try:
        assets = await state.resolve_media_uc.resolve_many(body.share_urls)
    except ResolutionError as e:
        log.warning("batch_parse_failed", count=len(body.share_urls), error=e.code)
        return _error_response(e)
    except Exception:
        log.exception("batch_parse_unhandled_error", count=len(body.share_urls))
        return _unexpected_error()
    return BatchVideoInfoResponse(
        videos=[VideoInfoResponse.from_asset(a) for a in assets]
    )


@router.post("/check-url", response_model=CheckUrlResponse)
async def check_url(request: Request, body: CheckUrlRequest) -> CheckUrlResponse:
    state = cast(AppState, request.app.state)
    return CheckUrlResponse.from_check(state.check_url_uc.execute(body.url))


@router.get("/version", response_model=VersionResponse)
async def version(request: Request) -> VersionResponse:
    state = cast(AppState, request.app.state)
    return VersionResponse.from_info(state.version_uc.execute())
