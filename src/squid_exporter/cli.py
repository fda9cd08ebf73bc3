"""CLI entry point for squid-exporter."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from squid_exporter import __version__

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="squid-exporter",
        description="Prometheus exporter for the Squid cache manager info report.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"squid-exporter {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to config TOML file",
    )
    parser.add_argument(
        "--squid-url",
        default=None,
        metavar="URL",
        help="Squid cache manager info URL "
        "(default: http://localhost:3128/squid-internal-mgr/info)",
    )
    parser.add_argument(
        "--listen-address",
        default=None,
        metavar="ADDR",
        help="The address to listen on for HTTP requests (default: :9399)",
    )
    parser.add_argument(
        "--metrics-path",
        default=None,
        metavar="PATH",
        help="Path under which to expose metrics (default: /metrics)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, dict[str, object]]:
    """Collect CLI flags that were given into config-shaped overrides."""
    overrides: dict[str, dict[str, object]] = {}
    if args.squid_url is not None:
        overrides.setdefault("squid", {})["url"] = args.squid_url
    if args.listen_address is not None:
        overrides.setdefault("exporter", {})["listen_address"] = args.listen_address
    if args.metrics_path is not None:
        overrides.setdefault("exporter", {})["metrics_path"] = args.metrics_path
    if args.log_level is not None:
        overrides.setdefault("exporter", {})["log_level"] = args.log_level
    return overrides


def _run(args: argparse.Namespace) -> None:
    from prometheus_client import CollectorRegistry

    from squid_exporter.base import ConfigError
    from squid_exporter.collector import SquidCollector
    from squid_exporter.config import ConfigHolder, parse_listen_address
    from squid_exporter.server import make_server, serve_forever

    try:
        config_holder = ConfigHolder(path=args.config, overrides=_overrides(args))
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from None

    config = config_holder.config
    logging.basicConfig(level=config.exporter.log_level, format=_LOG_FORMAT)
    config_holder.install_signal_handler()

    # Dedicated registry: no process/platform/GC collectors, only squid.
    registry = CollectorRegistry()
    registry.register(SquidCollector.from_config_holder(config_holder))

    host, port = parse_listen_address(config.exporter.listen_address)
    try:
        server = make_server(host, port, registry, config.exporter.metrics_path)
    except OSError as exc:
        logger.error("Cannot listen on %s: %s", config.exporter.listen_address, exc)
        raise SystemExit(1) from None

    logger.info("Scraping squid at %s", config.squid.url)
    serve_forever(server)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the squid-exporter CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _run(args)
