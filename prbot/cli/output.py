"""
CLI output formatting helpers.

Provides consistent formatting for human-readable and JSON output.
"""

import json
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from prbot.merge.categories import category_rank
from prbot.merge.models import EngineResult, LoopState
from prbot.merge.ordering import BatchEntry


class OutputFormat(str, Enum):
    """Output format options."""

    HUMAN = "human"
    JSON = "json"


error_console = Console(stderr=True)

_STATE_COLORS = {
    LoopState.CONVERGED: "green",
    LoopState.EXHAUSTED: "yellow",
    LoopState.ABORTED: "red",
}


class Formatter:
    """Output formatter with support for multiple formats."""

    def __init__(
        self,
        format: OutputFormat = OutputFormat.HUMAN,
        verbose: bool = False,
        color: bool = True,
    ):
        self.format = format
        self.verbose = verbose
        self.console = Console(force_terminal=color, no_color=not color)

    def error(self, message: str, code: Optional[str] = None):
        """Display error message."""
        if self.format == OutputFormat.JSON:
            self.print_json({"status": "error", "error": {"message": message, "code": code or "ERROR"}})
        else:
            error_console.print(f"[red]✗[/red] {message}")
            if code:
                error_console.print(f"  [dim]Code:[/dim] {code}")

    def info(self, message: str):
        """Display info message."""
        if self.format != OutputFormat.JSON:
            self.console.print(f"[blue]ℹ[/blue] {message}")

    def print_json(self, data: Any):
        """Print data as JSON."""
        print(json.dumps(data, indent=2, default=str))

    def print_result(self, pull_request_id: int, result: Optional[EngineResult]):
        """Print the outcome of an engine run."""
        if result is None:
            if self.format == OutputFormat.JSON:
                self.print_json({"pull_request_id": pull_request_id, "state": None})
            else:
                self.info(f"PR {pull_request_id} has no conflicts to resolve")
            return

        progress = result.progress
        if self.format == OutputFormat.JSON:
            self.print_json({
                "pull_request_id": pull_request_id,
                "state": result.state.value,
                "rounds": progress.attempts,
                "resolved": progress.resolved_count,
                "unresolved": progress.max_unresolved,
                "remaining": progress.remaining,
                "outcomes": [
                    outcome.to_dict()
                    for summary in progress.rounds
                    for outcome in summary.outcomes
                ],
            })
            return

        color = _STATE_COLORS.get(result.state, "white")
        self.console.print()
        self.console.print(Panel.fit(
            f"State: [{color}]{result.state.value}[/{color}]\n"
            f"  [dim]Rounds:[/dim] {progress.attempts}\n"
            f"  [dim]Resolved:[/dim] {progress.resolved_count} of {progress.max_unresolved}\n"
            f"  [dim]Remaining:[/dim] {progress.remaining}",
            title=f"PR {pull_request_id}",
        ))

        if self.verbose:
            for summary in progress.rounds:
                table = Table(title=f"Round {summary.round_number}")
                table.add_column("Path", style="cyan")
                table.add_column("Category")
                table.add_column("Result")
                for outcome in summary.outcomes:
                    if outcome.applied:
                        status = "[green]applied[/green]"
                    elif outcome.accepted:
                        status = f"[yellow]{outcome.error or 'not applied'}[/yellow]"
                    else:
                        status = f"[dim]declined: {outcome.result.reason if outcome.result else ''}[/dim]"
                    table.add_row(outcome.conflict.path, outcome.category.value, status)
                self.console.print(table)

    def print_batch(self, pull_request_id: int, entries: list[BatchEntry]):
        """Print the batch the next round would resolve."""
        if self.format == OutputFormat.JSON:
            self.print_json({
                "pull_request_id": pull_request_id,
                "batch": [
                    {
                        "priority": category_rank(entry.category),
                        "category": entry.category.value,
                        "conflict_id": entry.conflict.conflict_id,
                        "path": entry.conflict.path,
                    }
                    for entry in entries
                ],
            })
            return

        if not entries:
            self.console.print("[dim]No auto-resolvable conflicts[/dim]")
            return

        table = Table(title=f"PR {pull_request_id}: resolution order")
        table.add_column("#", justify="right")
        table.add_column("Category")
        table.add_column("Conflict", justify="right")
        table.add_column("Path", style="cyan")
        for index, entry in enumerate(entries, start=1):
            table.add_row(
                str(index),
                entry.category.value,
                str(entry.conflict.conflict_id),
                entry.conflict.path,
            )
        self.console.print(table)

    def print_settings(self, values: dict[str, Any], title: str = "Settings"):
        """Print key/value configuration."""
        if self.format == OutputFormat.JSON:
            self.print_json(values)
            return

        table = Table(title=title)
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in values.items():
            table.add_row(key, str(value))
        self.console.print(table)
