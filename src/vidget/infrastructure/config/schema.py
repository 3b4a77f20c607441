"""Validated configuration models and the VIDGET_* environment reader."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import AliasChoices, AliasPath, BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vidget.infrastructure.douyin.constants import (
    DESKTOP_USER_AGENT,
    MOBILE_USER_AGENT,
)

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _flat_or_nested(flat: str, section: str, key: str) -> AliasChoices:
    """Accept ``flat`` (ENV/CLI layers) or ``section.key`` (YAML layer)."""
    return AliasChoices(flat, AliasPath(section, key))


class CacheConfig(BaseModel):
    """``cache:`` section."""

    backend: Literal["memory"] = "memory"
    ttl_seconds: int = Field(
        default=3600, ge=0, description="0 effectively disables caching."
    )
    max_entries: int = Field(default=10_000, gt=0, description="LRU capacity.")


class ResolverConfig(BaseModel):
    """``resolver:`` section."""

    max_concurrent: int = Field(
        default=5, gt=0, description="Parallel pipeline runs per batch request."
    )
    synthesize_fallback_url: bool = Field(
        default=True,
        description="Guess a play URL from the item id when extraction finds none.",
    )


class AppConfig(BaseModel):
    """
    Final configuration handed to the app.

    ``http`` and ``logging`` are stored as flat ``http_*``/``log_*`` fields
    so ENV and CLI layers can address them without nesting; YAML still
    writes them as sections. ``cache`` and ``resolver`` stay nested.
    """

    app_name: str = "vidget"
    environment: Environment = Field(
        default="dev", description="Selects the default log format."
    )

    http_redirect_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        validation_alias=_flat_or_nested(
            "http_redirect_timeout_seconds", "http", "redirect_timeout_seconds"
        ),
    )
    http_page_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        validation_alias=_flat_or_nested(
            "http_page_timeout_seconds", "http", "page_timeout_seconds"
        ),
    )
    http_metadata_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        validation_alias=_flat_or_nested(
            "http_metadata_timeout_seconds", "http", "metadata_timeout_seconds"
        ),
    )
    http_mobile_user_agent: str = Field(
        default=MOBILE_USER_AGENT,
        validation_alias=_flat_or_nested(
            "http_mobile_user_agent", "http", "mobile_user_agent"
        ),
        description="Sent on the short-link redirect request.",
    )
    http_desktop_user_agent: str = Field(
        default=DESKTOP_USER_AGENT,
        validation_alias=_flat_or_nested(
            "http_desktop_user_agent", "http", "desktop_user_agent"
        ),
        description="Sent on page and item-info requests.",
    )

    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=_flat_or_nested("log_level", "logging", "level"),
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=_flat_or_nested("log_format", "logging", "format"),
        description="console/json; None means derive from environment.",
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    @model_validator(mode="after")
    def _default_log_format(self) -> "AppConfig":
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """Inverse of the YAML layout; feeding it back validates to an equal config."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "redirect_timeout_seconds": self.http_redirect_timeout_seconds,
                "page_timeout_seconds": self.http_page_timeout_seconds,
                "metadata_timeout_seconds": self.http_metadata_timeout_seconds,
                "mobile_user_agent": self.http_mobile_user_agent,
                "desktop_user_agent": self.http_desktop_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": self.cache.model_dump(),
            "resolver": self.resolver.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Flat ``VIDGET_*`` variables, e.g. ``VIDGET_CACHE_TTL_SECONDS=60``.

    Every field is optional; only variables that are actually set end up
    in ``to_update_dict()``, so unset ones never mask YAML values.
    """

    model_config = SettingsConfigDict(
        env_prefix="VIDGET_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_redirect_timeout_seconds: Optional[float] = None
    http_page_timeout_seconds: Optional[float] = None
    http_metadata_timeout_seconds: Optional[float] = None
    http_mobile_user_agent: Optional[str] = None
    http_desktop_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[Literal["memory"]] = None
    cache_ttl_seconds: Optional[int] = None
    cache_max_entries: Optional[int] = None

    resolver_max_concurrent: Optional[int] = None
    resolver_synthesize_fallback_url: Optional[bool] = None

    def to_update_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
