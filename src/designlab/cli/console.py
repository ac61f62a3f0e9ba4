"""Rich console output for the design-lab CLI."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from designlab.domain.models import ModelOutcome, RankedDesign

# Shared console instances
console = Console()
error_console = Console(stderr=True)


def print_header(title: str, subtitle: str | None = None) -> None:
    """Print a styled header panel."""
    content = Text(title, style="bold blue")
    if subtitle:
        content.append(f"\n{subtitle}", style="dim")
    console.print(Panel(content, expand=False))


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_success(message: str) -> None:
    console.print(Panel(message, title="Success", border_style="green"))


def print_run_info(info: dict[str, str]) -> None:
    """Print a key/value table describing the run about to start."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in info.items():
        table.add_row(key, value)
    console.print(table)


def print_rankings(rankings: Sequence[RankedDesign]) -> None:
    """Print the ranking table, best design first."""
    if not rankings:
        console.print("[yellow]No designs were ranked.[/yellow]")
        return

    table = Table(title="Rankings", show_header=True)
    table.add_column("Rank", style="cyan", justify="right")
    table.add_column("Design", style="bold")
    table.add_column("Generated by", style="magenta")
    table.add_column("Score", justify="right")
    table.add_column("Variance", justify="right")
    table.add_column("Consensus")

    for r in rankings:
        table.add_row(
            str(r.rank),
            r.design_id,
            r.generated_by,
            f"{r.overall_score:.2f}",
            f"{r.mean_variance:.2f}",
            r.consensus.value,
        )
    console.print(table)


def print_failures(failures: Sequence[ModelOutcome]) -> None:
    """Print per-model failures; nothing when every invocation succeeded."""
    if not failures:
        return

    table = Table(title="Failures", show_header=True, title_style="bold red")
    table.add_column("Phase", style="cyan")
    table.add_column("Model", style="magenta")
    table.add_column("Design")
    table.add_column("Error (summary)", style="red")

    for outcome in failures:
        summary = (outcome.error or "").split("\n")[0][:80]
        table.add_row(outcome.phase.value, outcome.model, outcome.candidate_id or "-", summary)
    console.print(table)
