"""Watermark-free URL extraction from a raw item-info document.

Strategies run in a fixed order and the first non-empty URL wins:

    1. ``video.play_addr.url_list``     last entry, full marker rewrite
    2. ``video.download_addr.url_list`` last entry, ``watermark=0``
    3. ``video.nwm_video_url_list``     first entry, verbatim
    4. ``video.bit_rate``               highest bit-rate variant, ``playwm`` -> ``play``

The play/download lists put the higher-fidelity variant last while the
dedicated no-watermark list puts it first. Both orderings are kept as the
platform serves them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from vidget.infrastructure.douyin.document import dig, url_list
from vidget.infrastructure.douyin.constants import (
    CLEAN_PLAY_HOST,
    FALLBACK_PLAY_TEMPLATE,
    LEGACY_PLAY_HOST,
)

log = structlog.get_logger(__name__)

Strategy = Callable[[dict[str, Any]], str]


def strip_play_marker(url: str) -> str:
    return url.replace("playwm", "play")


def rewrite_play_url(url: str) -> str:
    """Apply every known watermark rewrite to a play-address URL."""
    url = strip_play_marker(url)
    url = url.replace("watermark=1", "watermark=0")
    url = url.replace("&ratio=720p", "")
    return url.replace(LEGACY_PLAY_HOST, CLEAN_PLAY_HOST)


def from_play_addr(item: dict[str, Any]) -> str:
    urls = url_list(item, "video", "play_addr")
    if not urls:
        return ""
    return rewrite_play_url(urls[-1])


def from_download_addr(item: dict[str, Any]) -> str:
    urls = url_list(item, "video", "download_addr")
    if not urls:
        return ""
    return urls[-1].replace("watermark=1", "watermark=0")


def from_nwm_list(item: dict[str, Any]) -> str:
    urls = dig(item, "video", "nwm_video_url_list")
    if not isinstance(urls, list) or not urls or not isinstance(urls[0], str):
        return ""
    return urls[0]


def _bit_rate_value(variant: Any) -> float:
    value = variant.get("bit_rate") if isinstance(variant, dict) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return float("-inf")
    return float(value)


def from_bit_rate(item: dict[str, Any]) -> str:
    variants = dig(item, "video", "bit_rate")
    if not isinstance(variants, list) or not variants:
        return ""
    # max() keeps the first of several equal maxima
    best = max(variants, key=_bit_rate_value)
    urls = url_list(best, "play_addr")
    if not urls:
        return ""
    return strip_play_marker(urls[0])


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("play_addr", from_play_addr),
    ("download_addr", from_download_addr),
    ("nwm_video_url_list", from_nwm_list),
    ("bit_rate", from_bit_rate),
)


def resolve_watermark_free_url(item: dict[str, Any]) -> str:
    """Return the first non-empty strategy result, or ``""``."""
    for name, strategy in STRATEGIES:
        url = strategy(item)
        if url:
            log.debug("watermark_url_extracted", strategy=name, url=url)
            return url
    log.warning("watermark_url_strategies_exhausted")
    return ""


def build_fallback_url(item_id: str, item: dict[str, Any]) -> str:
    """Synthesize a best-effort play URL from the item id.

    Prefers the ``play_addr.uri`` video id when the document carries one.
    The result is not guaranteed to be playable.
    """
    uri = dig(item, "video", "play_addr", "uri")
    video_id = uri if isinstance(uri, str) and uri else item_id
    if not video_id:
        return ""
    url = FALLBACK_PLAY_TEMPLATE.format(video_id=video_id)
    log.info("watermark_url_synthesized", item_id=item_id, url=url)
    return url
