"""Tests for the squid-exporter command line."""

from __future__ import annotations

import subprocess
import sys
import textwrap
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from squid_exporter import __version__
from squid_exporter.cli import _build_parser, _overrides, main


class TestParser:
    def test_defaults_are_unset(self) -> None:
        args = _build_parser().parse_args([])
        assert args.config is None
        assert args.squid_url is None
        assert args.listen_address is None
        assert _overrides(args) == {}

    def test_flags_become_overrides(self) -> None:
        args = _build_parser().parse_args(
            [
                "--squid-url",
                "http://proxy:3128/squid-internal-mgr/info",
                "--listen-address",
                "127.0.0.1:9400",
                "--metrics-path",
                "/m",
                "--log-level",
                "DEBUG",
            ]
        )
        assert _overrides(args) == {
            "squid": {"url": "http://proxy:3128/squid-internal-mgr/info"},
            "exporter": {
                "listen_address": "127.0.0.1:9400",
                "metrics_path": "/m",
                "log_level": "DEBUG",
            },
        }

    def test_bad_log_level_rejected(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["--log-level", "LOUD"])

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestMain:
    def test_invalid_config_exits_1(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[squid\nbroken")
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(path)])
        assert exc_info.value.code == 1
        assert "Invalid TOML" in capsys.readouterr().err

    def test_invalid_flag_value_exits_1(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("")
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(path), "--squid-url", "not-a-url"])
        assert exc_info.value.code == 1

    @patch("squid_exporter.server.make_server", side_effect=OSError("Address already in use"))
    def test_bind_failure_exits_1(self, _mock_make: MagicMock, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("")
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(path)])
        assert exc_info.value.code == 1

    @patch("squid_exporter.server.serve_forever")
    @patch("squid_exporter.server.make_server")
    def test_wires_registry_and_listener(
        self, mock_make: MagicMock, mock_serve: MagicMock, tmp_path: Path
    ) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            textwrap.dedent(
                """\
                [exporter]
                listen_address = "127.0.0.1:9400"
                metrics_path = "/squid"
                """
            )
        )
        with patch("squid_exporter.config.ConfigHolder.install_signal_handler"):
            main(["--config", str(path)])

        host, port, registry, metrics_path = mock_make.call_args.args
        assert (host, port, metrics_path) == ("127.0.0.1", 9400, "/squid")
        mock_serve.assert_called_once_with(mock_make.return_value)

        # Only the squid collector is registered: no process/GC metrics.
        names = set(registry._names_to_collectors)  # noqa: SLF001
        assert "up" in names
        assert "number_of_store_entries" in names
        assert not any(n.startswith(("process_", "python_")) for n in names)


class TestModuleEntryPoint:
    def test_help(self) -> None:
        result = subprocess.run(
            [sys.executable, "-m", "squid_exporter", "--help"],
            capture_output=True,
            text=True,
            timeout=30,
        )
        assert result.returncode == 0
        assert "--squid-url" in result.stdout
        assert "--listen-address" in result.stdout
