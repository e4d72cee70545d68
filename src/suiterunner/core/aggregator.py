"""Folding test outcomes into a run summary."""

from typing import Callable, Iterable, Optional

from suiterunner.core.models import Summary, TestOutcome, TestStatus


class SummaryAggregator:
    """Accumulates per-test outcomes into a Summary.

    Folding is not idempotent: each suite's outcomes must be folded once.
    """

    def __init__(self, on_outcome: Optional[Callable[[TestOutcome], None]] = None):
        """Initialize the aggregator.

        Args:
            on_outcome: Called for every outcome after it has been counted
        """
        self.on_outcome = on_outcome

    def fold(self, outcomes: Iterable[TestOutcome], suite_name: str, summary: Summary) -> float:
        """Fold one suite's outcomes into the summary.

        Returns:
            The suite's total duration (sum of its test durations)
        """
        suite_time = 0.0
        test_times = summary.per_suite_test_times.setdefault(suite_name, {})

        for outcome in outcomes:
            summary.total_tests += 1
            suite_time += outcome.duration
            test_times[outcome.test_name] = outcome.duration

            if outcome.status == TestStatus.PASS:
                summary.passed += 1
            elif outcome.status == TestStatus.SKIPPED:
                summary.skipped += 1
                summary.skips.append(outcome)
            elif outcome.status == TestStatus.FAIL:
                summary.failures.append(outcome)
            else:
                summary.errors.append(outcome)

            if self.on_outcome:
                self.on_outcome(outcome)

        summary.per_suite_time[suite_name] = suite_time
        summary.total_cpu_time += suite_time
        return suite_time


def fold(outcomes: Iterable[TestOutcome], suite_name: str, summary: Summary) -> None:
    """Fold one suite's outcomes into ``summary`` without progress callbacks."""
    SummaryAggregator().fold(outcomes, suite_name, summary)
