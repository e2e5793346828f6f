from __future__ import annotations

from typing import Any, Dict, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

LEVELS = ("compartment", "network", "subnet", "record")
_LEVEL_LABELS = {
    "compartment": "compartments",
    "network": "VCNs",
    "subnet": "subnets",
    "record": "hosts",
}


def _format_counts(counts: Dict[str, int]) -> str:
    return ", ".join(f"{_LEVEL_LABELS[level]}={counts.get(level, 0)}" for level in LEVELS)


class WalkProgress:
    def __init__(self, *, enabled: bool, console: Optional[Console] = None) -> None:
        self._enabled = bool(enabled)
        self._console = console or Console(stderr=True)
        self._progress = None
        self._task: Optional[int] = None
        self._counts: Dict[str, int] = {}
        self._started = False
        if self._enabled:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                TextColumn("{task.fields[counts]}", justify="left"),
                TimeElapsedColumn(),
                console=self._console,
                transient=True,
            )

    def __enter__(self) -> WalkProgress:
        if self._enabled and self._progress and not self._started:
            self._progress.start()
            self._task = self._progress.add_task("Discovery", total=None, counts=_format_counts(self._counts))
            self._started = True
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        if self._enabled and self._progress and self._started:
            self._progress.stop()
            self._started = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def advance(self, level: str) -> None:
        self._counts[level] = self._counts.get(level, 0) + 1
        if not self._enabled or not self._progress or self._task is None:
            return
        self._progress.update(self._task, counts=_format_counts(self._counts))


def render_run_summary_table(
    *,
    enabled: bool,
    status: str,
    stats: Dict[str, Any],
    target: str,
    console: Optional[Console] = None,
) -> None:
    if not enabled:
        return
    table = Table(title="Run Summary", show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Status", status)
    table.add_row("Compartments", str(stats.get("compartments", 0)))
    table.add_row("VCNs", str(stats.get("networks", 0)))
    table.add_row("Subnets", str(stats.get("subnets", 0)))
    table.add_row("Private IPs", str(stats.get("addresses", 0)))
    table.add_row("Host records", str(stats.get("records", 0)))
    table.add_row("Branch errors", str(stats.get("branch_errors", 0)))
    table.add_row("Target", target)
    (console or Console(stderr=True)).print(table)
