"""Pydantic-validated config with SIGHUP-triggered hot-reload.

TOML loading uses ``tomllib`` (3.11+) with ``tomli`` fallback.
"""

from __future__ import annotations

import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Literal
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, field_validator

from squid_exporter.base import ConfigError

if sys.version_info >= (3, 11):
    import tomllib  # type: ignore[import-not-found]
else:
    try:
        import tomllib  # type: ignore[import-not-found]
    except ModuleNotFoundError:
        import tomli as tomllib

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path("~/.config/squid-exporter").expanduser()
_DEFAULT_CONFIG_PATH = _CONFIG_DIR / "config.toml"

DEFAULT_SQUID_URL = "http://localhost:3128/squid-internal-mgr/info"
DEFAULT_LISTEN_ADDRESS = ":9399"


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` into ``(host, port)``.

    An empty host (``":9399"``) means all interfaces.  IPv6 hosts are
    written in brackets: ``"[::1]:9399"``.
    """
    host, sep, port_str = address.rpartition(":")
    if not sep:
        msg = f"listen address {address!r} must be host:port"
        raise ValueError(msg)
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_str)
    except ValueError:
        msg = f"invalid port in listen address {address!r}"
        raise ValueError(msg) from None
    if not 0 <= port <= 65535:
        msg = f"port {port} out of range in listen address {address!r}"
        raise ValueError(msg)
    return host or "0.0.0.0", port  # nosec B104


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class SquidConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str = DEFAULT_SQUID_URL
    timeout_seconds: float = 10.0
    max_response_bytes: int = 1024 * 1024

    @field_validator("url")
    @classmethod
    def _check_url(cls, v: str) -> str:
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            msg = "url must be an absolute http(s) URL"
            raise ValueError(msg)
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def _check_timeout(cls, v: float) -> float:
        if v <= 0 or v > 300:
            msg = "timeout_seconds must be between 0 (exclusive) and 300"
            raise ValueError(msg)
        return v

    @field_validator("max_response_bytes")
    @classmethod
    def _check_max_response_bytes(cls, v: int) -> int:
        if v < 1024:
            msg = "max_response_bytes must be at least 1024"
            raise ValueError(msg)
        return v


class ExporterConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    listen_address: str = DEFAULT_LISTEN_ADDRESS
    metrics_path: str = "/metrics"
    missing_keys: Literal["zero", "omit"] = "zero"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("listen_address")
    @classmethod
    def _check_listen_address(cls, v: str) -> str:
        parse_listen_address(v)
        return v

    @field_validator("metrics_path")
    @classmethod
    def _check_metrics_path(cls, v: str) -> str:
        if not v.startswith("/"):
            msg = "metrics_path must start with '/'"
            raise ValueError(msg)
        return v


class SquidExporterConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    squid: SquidConfig = SquidConfig()
    exporter: ExporterConfig = ExporterConfig()


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> SquidExporterConfig:
    """Load config from *path*, default locations, or built-in defaults.

    Resolution order:
    1. Explicit *path* (error if missing or invalid).
    2. ``~/.config/squid-exporter/config.toml`` (skip silently if absent).
    3. Built-in defaults.

    Raises :class:`ConfigError` on parse/validation failure.
    """
    if path is not None:
        return _load_from_path(path)

    if _DEFAULT_CONFIG_PATH.is_file():
        return _load_from_path(_DEFAULT_CONFIG_PATH)

    return SquidExporterConfig()


def _load_from_path(path: Path) -> SquidExporterConfig:
    """Parse a TOML file and return a validated config."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data = tomllib.loads(raw.decode())
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    try:
        return SquidExporterConfig(**data)
    except Exception as exc:
        raise ConfigError(f"Config validation error in {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# ConfigHolder: runtime config with SIGHUP reload
# ---------------------------------------------------------------------------


class ConfigHolder:
    """Thread-safe config container with signal-triggered reload.

    Usage::

        holder = ConfigHolder(path)
        holder.install_signal_handler()

        # At the start of each scrape:
        holder.check_reload()
        cfg = holder.config

    Values passed as *overrides* (CLI flags) are re-applied after every
    reload so they keep precedence over the file.
    """

    def __init__(
        self,
        path: Path | None = None,
        overrides: dict[str, dict[str, object]] | None = None,
    ) -> None:
        self._path = path
        self._overrides = overrides or {}
        self._config = self._load()
        self._reload_flag = threading.Event()

    @property
    def config(self) -> SquidExporterConfig:
        return self._config

    def reload(self) -> None:
        """Reload config from disk.  On failure, keep the old config."""
        try:
            self._config = self._load()
            logger.info("Config reloaded successfully")
        except ConfigError:
            logger.warning("Config reload failed; keeping previous config", exc_info=True)

    def install_signal_handler(self) -> None:
        """Register SIGHUP to set the reload flag (Unix only)."""
        if not hasattr(signal, "SIGHUP"):
            return
        signal.signal(signal.SIGHUP, self._on_sighup)

    def check_reload(self) -> None:
        """Poll the reload flag; call before using the config."""
        if self._reload_flag.is_set():
            self._reload_flag.clear()
            self.reload()

    # ------------------------------------------------------------------

    def _load(self) -> SquidExporterConfig:
        config = load_config(self._path)
        if not self._overrides:
            return config
        data = config.model_dump()
        for section, values in self._overrides.items():
            data.setdefault(section, {}).update(values)
        try:
            return SquidExporterConfig(**data)
        except Exception as exc:
            raise ConfigError(f"Invalid command-line override: {exc}") from exc

    def _on_sighup(self, signum: int, frame: object) -> None:
        self._reload_flag.set()
