"""``vidget`` console entrypoint: parse flags, load config, serve the API."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn

from vidget.infrastructure.config import load_config
from vidget.infrastructure.logging.setup import configure_logging
from vidget.interfaces.app import create_app

log = structlog.get_logger(__name__)

DEFAULT_PORT = 3000

# argparse dest -> flat config key understood by load_config()
_OVERRIDE_FLAGS: dict[str, str] = {
    "environment": "environment",
    "log_level": "log_level",
    "log_format": "log_format",
    "cache_ttl": "cache_ttl_seconds",
    "max_concurrent": "resolver_max_concurrent",
    "fallback_url": "resolver_synthesize_fallback_url",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vidget",
        description="Serve the Douyin watermark-free video resolver API.",
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help="Bind host (overrides HOST env).")
    server.add_argument(
        "--port", type=int, help=f"Bind port (overrides PORT env, default {DEFAULT_PORT})."
    )

    sources = parser.add_argument_group("configuration sources")
    sources.add_argument("--config", type=Path, help="Path to YAML config file.")
    sources.add_argument("--dotenv", type=Path, help="Path to .env file.")

    overrides = parser.add_argument_group("overrides (beat YAML and env)")
    overrides.add_argument("--environment", choices=["dev", "test", "prod"])
    overrides.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    overrides.add_argument("--log-format", choices=["json", "console"])
    overrides.add_argument(
        "--cache-ttl", type=int, metavar="SECONDS", help="Resolution cache TTL."
    )
    overrides.add_argument(
        "--max-concurrent", type=int, metavar="N", help="Batch resolution fan-out."
    )
    overrides.add_argument(
        "--fallback-url",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Synthesize a play URL when no strategy finds one.",
    )
    return parser


def _cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Flat config overrides for every flag that was actually given."""
    return {
        key: getattr(args, dest)
        for dest, key in _OVERRIDE_FLAGS.items()
        if getattr(args, dest) is not None
    }


def _bind_address(args: argparse.Namespace) -> tuple[str, int]:
    host = args.host or os.getenv("HOST", "0.0.0.0")
    port = args.port or int(os.getenv("PORT", str(DEFAULT_PORT)))
    return host, port


def start(argv: Iterable[str] | None = None) -> None:
    """Process entrypoint: load config once, configure logging, serve."""
    args = _build_parser().parse_args(sys.argv[1:] if argv is None else list(argv))

    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=_cli_overrides(args),
    )
    log_config = configure_logging(config)

    host, port = _bind_address(args)
    log.info("server_starting", host=host, port=port, environment=config.environment)

    uvicorn.run(create_app(config), host=host, port=port, log_config=log_config)


if __name__ == "__main__":
    raise SystemExit(start())
