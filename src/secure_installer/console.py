"""Console output for install results."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from secure_installer.config import Settings
from secure_installer.types import InstallOutcome

SUCCESS_MARK = "✔"
FAILURE_MARK = "✖"


def format_outcome(outcome: InstallOutcome) -> str:
    """One-line rich markup for an outcome."""
    if outcome.success:
        return f"[green]{SUCCESS_MARK}[/green] {outcome.identifier}"
    return f"[red]{FAILURE_MARK}[/red] {outcome.identifier}: {outcome.detail}"


def build_summary(outcomes: Sequence[InstallOutcome]) -> Table:
    """Build the install summary table.

    Pure function of the outcome list: no printing, no state.

    Args:
        outcomes: Outcomes in input order.

    Returns:
        A rich Table with one row per outcome.
    """
    failed = sum(1 for o in outcomes if not o.success)
    table = Table(
        title="Install Summary",
        caption=f"{len(outcomes) - failed} succeeded, {failed} failed",
    )
    table.add_column("", width=1)
    table.add_column("Package", style="cyan")
    table.add_column("Ecosystem")
    table.add_column("Result")

    for outcome in outcomes:
        ecosystem = outcome.ecosystem.value if outcome.ecosystem else "-"
        if outcome.success:
            mark = f"[green]{SUCCESS_MARK}[/green]"
            result = str(outcome.artifact_path) if outcome.artifact_path else "installed"
        else:
            mark = f"[red]{FAILURE_MARK}[/red]"
            result = f"[red]{outcome.detail}[/red]"
        table.add_row(mark, outcome.identifier, ecosystem, result)
    return table


class TUI:
    """Text User Interface for secure-installer (non-interactive mode)."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize TUI.

        Args:
            console: Console to write to. Defaults to stdout.
        """
        self.console = console or Console()

    def show_outcomes(self, outcomes: Sequence[InstallOutcome]) -> None:
        """Print one line per outcome followed by the summary table."""
        self.console.print()
        for outcome in outcomes:
            self.console.print(format_outcome(outcome))
        self.console.print()
        self.console.print(build_summary(outcomes))

    def show_detections(self, rows: Sequence[tuple[str, str]]) -> None:
        """Display detected ecosystems.

        Args:
            rows: (identifier, ecosystem) pairs in input order.
        """
        table = Table(title="Detected Ecosystems")
        table.add_column("Package", style="cyan")
        table.add_column("Ecosystem")
        for identifier, ecosystem in rows:
            table.add_row(identifier, ecosystem)
        self.console.print(table)

    def show_settings(self, settings: Settings, source: str) -> None:
        """Display effective configuration."""
        self.console.print("\n[bold]Configuration[/bold]")
        self.console.print(f"  Config file: {source}")
        for key, value in settings.model_dump(by_alias=True).items():
            if isinstance(value, list):
                value = ", ".join(value)
            elif value is None:
                value = "(default)"
            self.console.print(f"  {key}: {value}")
        token_state = "set" if settings.github_token else "not set"
        self.console.print(f"  githubToken: {token_state}")

    def show_success(self, message: str) -> None:
        """Show success message.

        Args:
            message: Success message.
        """
        self.console.print(f"[green]✓[/green] {message}")

    def show_error(self, message: str) -> None:
        """Show error message.

        Args:
            message: Error message.
        """
        self.console.print(f"[red]✗[/red] {message}")

    def show_warning(self, message: str) -> None:
        """Show warning message."""
        self.console.print(f"[yellow]![/yellow] {message}")
