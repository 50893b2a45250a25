"""Tests for ``apimcp serve`` and the top-level CLI group."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from apimcp import __version__
from apimcp.cli import main

_CLEAN_ENV = {
    "OPENAPI_SPEC_URL": None,
    "API_BASE_URL": None,
    "API_KEY": None,
    "API_HEADERS": None,
    "API_TIMEOUT": None,
}


class TestMain:
    def test_version(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "serve" in result.output
        assert "tools" in result.output


class TestServe:
    def test_serve_builds_host_from_arguments(self) -> None:
        serve_stdio = AsyncMock()
        with patch("apimcp.host.stdio.serve_stdio", serve_stdio):
            runner = CliRunner()
            result = runner.invoke(
                main,
                [
                    "serve",
                    "users.yaml",
                    "--base-url",
                    "https://api.example.com",
                    "--header",
                    "X-Tenant: acme",
                ],
                env=_CLEAN_ENV,
            )

        assert result.exit_code == 0, result.output
        host = serve_stdio.call_args.args[0]
        assert host.settings.spec_url == "users.yaml"
        assert host.settings.base_url == "https://api.example.com"
        assert host.settings.headers == {"X-Tenant": "acme"}

    def test_serve_reads_environment(self) -> None:
        serve_stdio = AsyncMock()
        env = {
            **_CLEAN_ENV,
            "OPENAPI_SPEC_URL": "https://specs.example.com/api.json",
            "API_KEY": "secret",
            "API_TIMEOUT": "5",
        }
        with patch("apimcp.host.stdio.serve_stdio", serve_stdio):
            runner = CliRunner()
            result = runner.invoke(main, ["serve"], env=env)

        assert result.exit_code == 0, result.output
        settings = serve_stdio.call_args.args[0].settings
        assert settings.spec_url == "https://specs.example.com/api.json"
        assert settings.api_key == "secret"
        assert settings.timeout == 5.0

    def test_serve_requires_description(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["serve"], env=_CLEAN_ENV)
        assert result.exit_code == 2
        assert "DESCRIPTION is required" in result.output

    def test_serve_rejects_bad_headers_env(self) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["serve", "users.yaml"], env={**_CLEAN_ENV, "API_HEADERS": "nope"}
        )
        assert result.exit_code == 2
        assert "API_HEADERS" in result.output
