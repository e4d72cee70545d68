"""Terminal output for a run."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from suiterunner.core.models import Summary, TestOutcome


class TerminalReporter:
    """Prints progress characters while a run is going and the summary after it."""

    def __init__(self, console: Optional[Console] = None, slow_threshold: float = 1.0):
        self.console = console or Console()
        self.slow_threshold = slow_threshold

    def signal(self, char: str) -> None:
        """Print one progress character."""
        self.console.print(char, end="", highlight=False, markup=False)

    def print_times(self, summary: Summary, wall_time: float, verbose: bool = False) -> None:
        """Print suite timings, slowest first."""
        self.console.print("\n\n[bold]Suite times:[/bold]")

        suite_times = sorted(summary.per_suite_time.items(), key=lambda item: item[1], reverse=True)

        if verbose:
            for name, suite_time in suite_times:
                self.console.print(f"{escape(name)} ({suite_time:.3f})")
                details = summary.per_suite_test_times.get(name, {})
                for test_name, test_time in sorted(details.items(), key=lambda item: item[1], reverse=True):
                    # Highlight slow tests
                    marker = "*" if test_time > self.slow_threshold else " "
                    self.console.print(f"{marker} {test_time:.3f}  {escape(test_name)}", highlight=False)
                self.console.print()
        else:
            table = Table(show_header=True, box=None)
            table.add_column("Time", justify="right", style="cyan")
            table.add_column("Suite")
            for name, suite_time in suite_times:
                table.add_row(f"{suite_time:.3f}", escape(name))
            self.console.print(table)

        self.console.print(f"Total CPU time: {summary.total_cpu_time:.2f} seconds")
        if wall_time > 0:
            self.console.print(f"CPU time ratio: {summary.total_cpu_time / wall_time:.2f}")

    def print_summary(self, summary: Summary, wall_time: float) -> None:
        """Print the failure/error listings and the final verdict."""
        self.console.print(f"\n\nTime: {wall_time:.2f} seconds\n")

        if summary.errors:
            self._print_outcomes(summary.errors, "error")
        if summary.failures:
            if summary.errors:
                self.console.print("--\n")
            self._print_outcomes(summary.failures, "failure")

        if summary.cancelled:
            self.console.print("[yellow]Run cancelled before all suites finished[/yellow]")

        if summary.succeeded:
            self.console.print(f"[green]OK ({summary.total_tests} tests)[/green]")
        else:
            self.console.print("[red bold]FAILURES![/red bold]")
            self.console.print(
                f"Tests: {summary.total_tests}, Failures: {len(summary.failures)}, "
                f"Errors: {len(summary.errors)}, Skipped: {summary.skipped}"
            )

    def _print_outcomes(self, outcomes: list[TestOutcome], word: str) -> None:
        """Print a numbered listing of failed or errored tests."""
        if len(outcomes) == 1:
            self.console.print(f"There was 1 {word}:\n")
        else:
            self.console.print(f"There were {len(outcomes)} {word}s:\n")

        for index, outcome in enumerate(outcomes, start=1):
            self.console.print(f"{index}) {escape(outcome.suite_name)} :: {escape(outcome.test_name)}")
            if outcome.message:
                self.console.print(escape(outcome.message), highlight=False)
            for frame in outcome.stack_trace or []:
                self.console.print(escape(str(frame)), highlight=False)
            self.console.print()
