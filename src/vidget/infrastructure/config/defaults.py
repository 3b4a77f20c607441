"""Lowest-precedence configuration layer, in the YAML (sectioned) shape."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "vidget",
    "environment": "dev",
    "http": {
        "redirect_timeout_seconds": 15.0,
        "page_timeout_seconds": 15.0,
        "metadata_timeout_seconds": 10.0,
    },
    # format stays None so AppConfig derives it from environment
    "logging": {"level": "INFO", "format": None},
    "cache": {"backend": "memory", "ttl_seconds": 3600, "max_entries": 10_000},
    "resolver": {"max_concurrent": 5, "synthesize_fallback_url": True},
}
