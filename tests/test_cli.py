"""Tests for CLI commands using context injection.

Commands accept a _context parameter, so tests wire a real context around
fake HTTP clients and runners instead of patching module-level imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import typer
from conftest import NPM, FakeHttpClient, FakeRunner

from secure_installer import __version__, cli
from secure_installer.config import ConfigError, Settings
from secure_installer.context import AppContext, create_context


def _npm_side_effect(store: Path):
    def install(argv: list[str]) -> None:
        (store / argv[-1]).mkdir(parents=True, exist_ok=True)

    return install


@pytest.fixture
def context(
    temp_config_dir: Path,
    settings: Settings,
    fake_http: FakeHttpClient,
) -> AppContext:
    """Context with fakes and a working npm."""
    return create_context(
        config_dir=temp_config_dir,
        settings=settings,
        http=fake_http,
        runner=FakeRunner(side_effect=_npm_side_effect(settings.dependency_store)),
    )


class TestInstallCommand:
    """Tests for the install command."""

    def test_install_success(
        self,
        context: AppContext,
        fake_http: FakeHttpClient,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """All requests succeed: no exit raised, summary printed."""
        cli.install(packages=["npm:left-pad", "npm:is-odd"], _context=context)

        out = capsys.readouterr().out
        assert "npm:left-pad" in out
        assert "npm:is-odd" in out
        assert "2 succeeded, 0 failed" in out
        assert fake_http.closed is True

    def test_install_any_failure_exits_1(
        self,
        context: AppContext,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """One failed request fails the command, after every request ran."""
        with pytest.raises(typer.Exit) as exc_info:
            cli.install(packages=["npm:left-pad", "git", "pip:"], _context=context)

        assert exc_info.value.exit_code == 1
        out = capsys.readouterr().out
        assert "1 succeeded, 2 failed" in out
        assert "empty package name" in out

    def test_install_closes_http_on_error(
        self, context: AppContext, fake_http: FakeHttpClient
    ) -> None:
        """The HTTP client is closed even if the batch itself blows up."""

        async def boom(identifiers: list[str]) -> None:
            raise RuntimeError("boom")

        context.dispatcher.install_all = boom  # type: ignore[method-assign]

        with pytest.raises(RuntimeError):
            cli.install(packages=["npm:left-pad"], _context=context)
        assert fake_http.closed is True


class TestDetectCommand:
    """Tests for the detect command."""

    def test_detect_rows(
        self,
        context: AppContext,
        fake_http: FakeHttpClient,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Each identifier is classified without installing anything."""
        fake_http.add(f"{NPM}/left-pad")

        cli.detect(packages=["left-pad", "git", "brew:jq", "npm:"], _context=context)

        out = capsys.readouterr().out
        assert "npm" in out
        assert "system-tool" in out
        assert "brew" in out
        assert "empty" in out
        assert context.runner.calls == []  # type: ignore[attr-defined]
        assert fake_http.closed is True


class TestConfigCommands:
    """Tests for config commands."""

    def test_config_show(
        self,
        temp_config_dir: Path,
        fake_http: FakeHttpClient,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Settings are shown without revealing the token."""
        monkeypatch.setenv("GITHUB_TOKEN", "secret-value")
        ctx = create_context(config_dir=temp_config_dir, http=fake_http, runner=FakeRunner())

        cli.config_show(_context=ctx)

        out = capsys.readouterr().out
        assert "downloadAttempts: 3" in out
        assert "githubToken: set" in out
        assert "secret-value" not in out

    def test_config_set(self, context: AppContext) -> None:
        cli.config_set(key="download-attempts", value="5", _context=context)

        data = json.loads(context.config.config_file.read_text())
        assert data == {"downloadAttempts": "5"}

    def test_config_set_unknown_key(self, context: AppContext) -> None:
        with pytest.raises(typer.Exit) as exc_info:
            cli.config_set(key="colour", value="blue", _context=context)
        assert exc_info.value.exit_code == 1

    def test_invalid_config_file_exits_1(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A broken config file stops the command before any work."""

        def broken(**kwargs):
            raise ConfigError("bad config")

        monkeypatch.setattr(cli, "create_context", broken)

        with pytest.raises(typer.Exit) as exc_info:
            cli.install(packages=["npm:left-pad"])
        assert exc_info.value.exit_code == 1


class TestCallbacks:
    """Tests for global options."""

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(typer.Exit):
            cli.version_callback(True)
        assert __version__ in capsys.readouterr().out

    def test_version_not_requested(self) -> None:
        cli.version_callback(False)

    @pytest.mark.parametrize(("verbose", "level"), [(True, logging.DEBUG), (False, logging.WARNING)])
    def test_logging_level(self, verbose: bool, level: int) -> None:
        cli._configure_logging(verbose)
        assert logging.getLogger().level == level
