"""CLI commands using Typer."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from secure_installer.context import AppContext

import typer
from rich.console import Console
from rich.logging import RichHandler

from secure_installer import __version__
from secure_installer.config import ConfigError
from secure_installer.console import TUI
from secure_installer.context import create_context
from secure_installer.parser import EmptyIdentifierError, parse_identifier
from secure_installer.types import InstallOutcome

app = typer.Typer(
    name="secure-installer",
    help="Install packages from npm, GitHub releases, PyPI, crates.io, Go and Homebrew",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Configuration commands")

app.add_typer(config_app, name="config")

console = Console()
tui = TUI(console)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"secure-installer v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
) -> None:
    """Install packages from several ecosystems with download verification."""
    _configure_logging(verbose)


def _load_context(_context: AppContext | None) -> AppContext:
    """Use the injected context or build the production one."""
    if _context is not None:
        return _context
    try:
        return create_context()
    except ConfigError as e:
        tui.show_error(str(e))
        raise typer.Exit(1) from e


# ============================================================================
# Install Commands
# ============================================================================


async def _install_batch(ctx: AppContext, packages: list[str]) -> list[InstallOutcome]:
    """Run the whole batch, closing the HTTP client afterwards."""
    try:
        results = await ctx.dispatcher.install_all(packages)
    finally:
        await ctx.http.close()
    return results.outcomes


@app.command()
def install(
    packages: Annotated[
        list[str],
        typer.Argument(help="Packages to install, e.g. npm:left-pad github:owner/repo@v1.0"),
    ],
    _context=None,
) -> None:
    """Install one or more packages.

    Prefix a package with npm:, github:, pip:, cargo:, go: or brew: to pick
    its ecosystem. Without a prefix the ecosystem is detected.
    """
    ctx = _load_context(_context)
    outcomes = asyncio.run(_install_batch(ctx, packages))
    tui.show_outcomes(outcomes)

    if any(not o.success for o in outcomes):
        raise typer.Exit(1)


async def _detect_batch(ctx: AppContext, packages: list[str]) -> list[tuple[str, str]]:
    """Classify each identifier without installing anything."""
    rows: list[tuple[str, str]] = []
    try:
        for raw in packages:
            try:
                ecosystem = await ctx.dispatcher.classify(parse_identifier(raw))
            except EmptyIdentifierError:
                rows.append((raw, "empty"))
                continue
            rows.append((raw, ecosystem.value))
    finally:
        await ctx.http.close()
    return rows


@app.command()
def detect(
    packages: Annotated[list[str], typer.Argument(help="Packages to classify")],
    _context=None,
) -> None:
    """Show which ecosystem each package would be installed from."""
    ctx = _load_context(_context)
    rows = asyncio.run(_detect_batch(ctx, packages))
    tui.show_detections(rows)


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    _context=None,
) -> None:
    """Show current configuration."""
    ctx = _load_context(_context)
    tui.show_settings(ctx.settings, str(ctx.config.config_file))


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Configuration key, e.g. download-attempts")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
    _context=None,
) -> None:
    """Set a configuration value."""
    ctx = _load_context(_context)
    try:
        ctx.config.set_value(key, value)
    except ConfigError as e:
        tui.show_error(str(e))
        raise typer.Exit(1) from e
    tui.show_success(f"Set {key} to {value}")


if __name__ == "__main__":
    app()
