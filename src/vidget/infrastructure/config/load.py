"""Layered configuration loading: defaults < YAML < ENV < CLI."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_TOP_LEVEL_KEYS: tuple[str, ...] = ("app_name", "environment")

# section -> (flat prefix used by ENV/CLI, keys inside the section)
_SECTIONS: dict[str, tuple[str, tuple[str, ...]]] = {
    "http": (
        "http_",
        (
            "redirect_timeout_seconds",
            "page_timeout_seconds",
            "metadata_timeout_seconds",
            "mobile_user_agent",
            "desktop_user_agent",
        ),
    ),
    "logging": ("log_", ("level", "format")),
    "cache": ("cache_", ("backend", "ttl_seconds", "max_entries")),
    "resolver": ("resolver_", ("max_concurrent", "synthesize_fallback_url")),
}

# e.g. "cache_ttl_seconds" -> ("cache", "ttl_seconds")
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    f"{prefix}{key}": (section, key)
    for section, (prefix, keys) in _SECTIONS.items()
    for key in keys
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into ``base`` in place; nested mappings merge, scalars win."""
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _deep_merge(current, value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Bring one layer into the sectioned shape AppConfig validates.

    A layer may mix sectioned blocks (``{"cache": {"ttl_seconds": 60}}``)
    and flat keys (``{"cache_ttl_seconds": 60}``); flat keys win inside a
    layer. Unknown keys are dropped.
    """
    out: dict[str, Any] = {k: data[k] for k in _TOP_LEVEL_KEYS if k in data}

    for section in _SECTIONS:
        block = data.get(section)
        if isinstance(block, Mapping):
            out[section] = dict(block)

    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in data:
            out.setdefault(section, {})[key] = data[flat_key]

    return out


def _require_file(path: Path) -> Path:
    if not path.exists():
        raise FileNotFoundError(path)
    return path


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def _layers(
    config_path: Path | None, cli_overrides: Mapping[str, Any]
) -> Iterator[Mapping[str, Any]]:
    """Yield raw layers from lowest to highest precedence."""
    yield deepcopy(DEFAULT_CONFIG)
    if config_path is not None:
        yield _read_yaml_config(_require_file(config_path))
    yield EnvOverrides().to_update_dict()
    yield cli_overrides


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """
    Load and validate configuration.

    Precedence: defaults < YAML file < env vars (including ``dotenv_path``,
    which never overrides variables already set) < ``cli_overrides``.
    Reads files only; nothing is created on disk.

    Raises:
        FileNotFoundError: ``config_path`` or ``dotenv_path`` does not exist.
        ValueError: YAML is not a mapping.
        pydantic.ValidationError: the merged result is invalid.
    """
    if dotenv_path is not None:
        load_dotenv(_require_file(dotenv_path), override=False)

    merged: dict[str, Any] = {}
    for layer in _layers(config_path, cli_overrides or {}):
        _deep_merge(merged, _normalize_layer(layer))

    return AppConfig.model_validate(merged)
