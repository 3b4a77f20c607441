from .client import DouyinClient
from .item_id import ItemIdExtractor
from .link_classifier import classify
from .metadata import MetadataFetcher
from .redirect import RedirectResolver, repair_redirect_target
from .watermark import build_fallback_url, resolve_watermark_free_url

__all__ = [
    "DouyinClient",
    "ItemIdExtractor",
    "MetadataFetcher",
    "RedirectResolver",
    "build_fallback_url",
    "classify",
    "repair_redirect_target",
    "resolve_watermark_free_url",
]
