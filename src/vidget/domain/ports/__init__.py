from .cache import CachePort
from .douyin_client import DouyinClientPort
from .media_asset_repository import MediaAssetRepository

__all__ = [
    "CachePort",
    "DouyinClientPort",
    "MediaAssetRepository",
]
