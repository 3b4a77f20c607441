"""Tolerant accessors for the semi-structured item-info document."""

from __future__ import annotations

from typing import Any


def dig(doc: Any, *path: str) -> Any:
    """Walk nested dicts; any missing or non-dict step yields None."""
    node = doc
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def url_list(doc: Any, *path: str) -> list[str]:
    """Return the ``url_list`` under ``path`` as a list of strings."""
    urls = dig(doc, *path, "url_list")
    if not isinstance(urls, list):
        return []
    return [u for u in urls if isinstance(u, str)]


def cover_url(item: dict[str, Any]) -> str:
    covers = url_list(item, "video", "cover")
    return covers[0] if covers else ""


def title(item: dict[str, Any]) -> str:
    desc = item.get("desc")
    return desc if isinstance(desc, str) else ""


def author(item: dict[str, Any]) -> str:
    nickname = dig(item, "author", "nickname")
    return nickname if isinstance(nickname, str) else ""


def duration_seconds(item: dict[str, Any]) -> float:
    """Platform reports milliseconds; missing or non-numeric -> 0.0."""
    raw = dig(item, "video", "duration")
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return 0.0
    return round(raw / 1000, 3)


def display_fields(item: dict[str, Any]) -> dict[str, Any]:
    """Keyword arguments for the display part of ``MediaAsset``."""
    return {
        "cover_url": cover_url(item),
        "title": title(item),
        "author": author(item),
        "duration_seconds": duration_seconds(item),
    }
