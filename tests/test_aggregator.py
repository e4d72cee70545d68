"""Tests for the summary aggregator."""

import pytest

from suiterunner.core.aggregator import SummaryAggregator, fold
from suiterunner.core.models import Summary, TestOutcome, TestStatus


def outcome(name, status, duration, suite="FooTest", message=None):
    return TestOutcome(suite_name=suite, test_name=name, status=status, duration=duration, message=message)


def assert_consistent(summary):
    assert summary.total_tests == summary.passed + summary.skipped + len(summary.failures) + len(summary.errors)


class TestSummaryAggregator:
    """Tests for folding outcomes."""

    def test_pass_fail_skip_scenario(self):
        """Test a suite with one pass, one failure and one skip."""
        summary = Summary()
        outcomes = [
            outcome("testA", TestStatus.PASS, 0.1),
            outcome("testB", TestStatus.FAIL, 0.2),
            outcome("testC", TestStatus.SKIPPED, 0.05),
        ]

        fold(outcomes, "FooTest", summary)

        assert summary.total_tests == 3
        assert summary.passed == 1
        assert summary.skipped == 1
        assert [o.test_name for o in summary.skips] == ["testC"]
        assert [o.test_name for o in summary.failures] == ["testB"]
        assert summary.errors == []
        assert summary.per_suite_time["FooTest"] == pytest.approx(0.35)
        assert summary.total_cpu_time == pytest.approx(0.35)
        assert summary.per_suite_test_times["FooTest"] == {"testA": 0.1, "testB": 0.2, "testC": 0.05}
        assert_consistent(summary)

    def test_errors_are_listed(self):
        """Test that error outcomes land in the errors list."""
        summary = Summary()

        fold([outcome("testA", TestStatus.ERROR, 0.0, message="boom")], "FooTest", summary)

        assert [o.message for o in summary.errors] == ["boom"]
        assert not summary.succeeded
        assert_consistent(summary)

    def test_multiple_suites_accumulate(self):
        """Test that totals accumulate across suites."""
        summary = Summary()

        fold([outcome("a", TestStatus.PASS, 1.0, suite="One")], "One", summary)
        fold([outcome("b", TestStatus.FAIL, 2.0, suite="Two")], "Two", summary)

        assert summary.total_tests == 2
        assert summary.per_suite_time == {"One": 1.0, "Two": 2.0}
        assert summary.total_cpu_time == pytest.approx(3.0)
        assert_consistent(summary)

    def test_empty_suite_records_zero_time(self):
        """Test that a suite with no tests still gets a time entry."""
        summary = Summary()

        fold([], "Empty", summary)

        assert summary.total_tests == 0
        assert summary.per_suite_time == {"Empty": 0.0}

    def test_folding_twice_double_counts(self):
        """Test that folding is not idempotent."""
        summary = Summary()
        outcomes = [outcome("a", TestStatus.PASS, 0.5)]

        fold(outcomes, "FooTest", summary)
        fold(outcomes, "FooTest", summary)

        assert summary.total_tests == 2
        assert summary.passed == 2
        assert summary.total_cpu_time == pytest.approx(1.0)

    def test_on_outcome_callback(self):
        """Test that every outcome is reported to the callback."""
        seen = []
        aggregator = SummaryAggregator(on_outcome=lambda o: seen.append(o.status.signal))

        suite_time = aggregator.fold(
            [
                outcome("a", TestStatus.PASS, 0.1),
                outcome("b", TestStatus.FAIL, 0.1),
                outcome("c", TestStatus.ERROR, 0.1),
                outcome("d", TestStatus.SKIPPED, 0.1),
            ],
            "FooTest",
            Summary(),
        )

        assert seen == [".", "F", "E", "S"]
        assert suite_time == pytest.approx(0.4)
