from .check_url import CheckUrlUseCase
from .resolve_media import ResolveMediaUseCase
from .version import VersionUseCase

__all__ = [
    "CheckUrlUseCase",
    "ResolveMediaUseCase",
    "VersionUseCase",
]
