"""Rich terminal formatter for Fathom."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..analysis import AnalysisResult, count_label
from .base import BaseFormatter

# Colors for the nine opinion brackets, easiest first.
_OPINION_STYLES = {
    "trivial": "green",
    "easy": "green",
    "very readable": "green",
    "readable": "cyan",
    "easier than the norm": "cyan",
    "mature": "yellow",
    "complex": "yellow",
    "very difficult": "red",
    "obfuscated": "red bold",
}


class RichFormatter(BaseFormatter):
    """Rich terminal output: counts table, verdict panel, optional trace."""

    def __init__(self, verbosity: int = 0, console: Optional[Console] = None):
        super().__init__(verbosity)
        self.console = console or Console()

    def render(self, result: AnalysisResult) -> None:
        readability = result.readability

        if self.verbosity >= 1 and result.skipped:
            for name in result.skipped:
                self.console.print(f"[dim]Skipping imported sub[/dim] [yellow]{escape(name)}[/yellow]")
            self.console.print()

        table = Table(title=f"[bold]{escape(result.source)}[/bold]", show_header=True, header_style="bold cyan")
        table.add_column("Count", justify="right")
        table.add_column("Measure")
        for counter, count in readability.counts():
            table.add_row(str(count), count_label(count, counter))
        self.console.print(table)

        ratios = Table(show_header=True, header_style="bold cyan")
        ratios.add_column("Ratio")
        ratios.add_column("Value", justify="right")
        ratios.add_row("tokens / expression", f"{readability.token_per_expr:.2f}")
        ratios.add_row("expressions / statement", f"{readability.expr_per_stmt:.2f}")
        ratios.add_row("statements / subroutine", f"{readability.stmt_per_sub:.2f}")
        self.console.print(ratios)

        style = _OPINION_STYLES.get(readability.opinion, "white")
        self.console.print(
            Panel(
                f"readability is [bold]{readability.score:.2f}[/bold] "
                f"([{style}]{readability.opinion}[/{style}])",
                expand=False,
            )
        )

        if self.verbosity >= 2 and result.trace:
            self._print_trace(result)

    def _print_trace(self, result: AnalysisResult) -> None:
        trace = Table(title="Op trace", show_header=True, header_style="bold")
        trace.add_column("Body")
        trace.add_column("Op")
        trace.add_column("Category")
        trace.add_column("+tok", justify="right")
        trace.add_column("+expr", justify="right")
        trace.add_column("+stmt", justify="right")
        trace.add_column("+sub", justify="right")
        for entry in result.trace:
            inc = entry.increment
            trace.add_row(
                escape(entry.body),
                f"{'  ' * entry.depth}{escape(entry.op)}",
                entry.category.value,
                str(inc.tokens),
                str(inc.expressions),
                str(inc.statements),
                str(inc.subroutines),
            )
        self.console.print(trace)

    def format(self, result: AnalysisResult) -> str:
        with self.console.capture() as capture:
            self.render(result)
        return capture.get()
