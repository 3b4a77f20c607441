from __future__ import annotations

from collections.abc import Callable

import structlog

from vidget.domain.entities.media import LinkCheck

log = structlog.get_logger(__name__)


class CheckUrlUseCase:
    """Answers "is this a Douyin link?" without touching the network."""

    def __init__(self, *, classify_fn: Callable[[str], LinkCheck]) -> None:
        self._classify = classify_fn

    def execute(self, url: str) -> LinkCheck:
        result = self._classify(url)
        log.debug("check_url", url=url, is_valid=result.is_valid)
        return result
