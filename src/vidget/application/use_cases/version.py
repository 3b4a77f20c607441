from __future__ import annotations

from datetime import datetime, timezone

from vidget.domain.entities.media import VersionInfo


class VersionUseCase:
    """Reports service version; build time is fixed at construction."""

    def __init__(
        self,
        *,
        version: str,
        maintainer: str,
        description: str,
        build_time: datetime | None = None,
    ) -> None:
        started = build_time or datetime.now(timezone.utc)
        self._info = VersionInfo(
            version=version,
            build_time=started.isoformat().replace("+00:00", "Z"),
            maintainer=maintainer,
            description=description,
        )

    def execute(self) -> VersionInfo:
        return self._info
