"""Console rendering of run summaries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from .runner import RunSummary


def summary_table(summary: "RunSummary") -> Table:
    table = Table(title=f"gwignite {summary.mode} run", show_lines=False)
    table.add_column("metric")
    table.add_column("value", justify="right")
    table.add_row("events", str(summary.events))
    table.add_row("last t", str(summary.last_t))
    table.add_row("ignitions", str(summary.ignitions))
    for reason, count in sorted(summary.reasons.items()):
        table.add_row(f"reason[{reason}]", str(count))
    table.add_row("policy actions", str(summary.policy_actions))
    table.add_row("window_len", str(summary.window_len))
    table.add_row("ignite_rate", f"{summary.ignite_rate:.4f}")
    table.add_row("mean dG_broadcast", f"{summary.mean_d_g_broadcast:.4f}")
    table.add_row("trace", str(summary.trace_path))
    table.add_row("replay", str(summary.replay_path))
    return table


def render_summary(summary: "RunSummary", console: Optional[Console] = None) -> None:
    (console or Console()).print(summary_table(summary))
