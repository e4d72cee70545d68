"""Bounded-concurrency scheduling of suite processes."""

import logging
import threading
import time
from collections import deque
from typing import Callable, Optional, Sequence

from suiterunner.core.aggregator import SummaryAggregator
from suiterunner.core.executor import SuiteLauncher
from suiterunner.core.models import (
    RunningSuite,
    SuiteDescriptor,
    Summary,
    TestOutcome,
    TestStatus,
)
from suiterunner.core.parser import ResultParser
from suiterunner.errors import (
    ConfigurationError,
    LaunchError,
    ParseError,
    SuiteError,
    SuiteTimeoutError,
)

logger = logging.getLogger(__name__)

SUITE_STARTED = "<"
SUITE_FINISHED = ">"

DEFAULT_POLL_INTERVAL = 0.01


def _ignore_signal(signal: str) -> None:
    pass


class ProcessPoolScheduler:
    """Runs suites as child processes, at most ``concurrency_limit`` at a time.

    A single thread drives a poll loop: it sleeps ``poll_interval``, tops up
    the running set from the pending queue, then checks every running process
    without blocking. Each exited suite is parsed and folded into the summary
    exactly once.
    """

    def __init__(
        self,
        concurrency_limit: int = 5,
        launcher: Optional[SuiteLauncher] = None,
        parser: Optional[ResultParser] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        suite_timeout: Optional[float] = None,
        on_signal: Optional[Callable[[str], None]] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize the scheduler.

        Args:
            concurrency_limit: Default maximum number of simultaneous suites
            launcher: Starts and stops suite processes
            parser: Parses suite output artifacts
            poll_interval: Seconds to sleep between polls
            suite_timeout: Kill suites running longer than this many seconds
            on_signal: Receives progress characters (``<``, ``>``, ``.``, ``F``, ``E``, ``S``)
            cancel_event: When set, running suites are torn down and the run ends
        """
        self.concurrency_limit = concurrency_limit
        self.launcher = launcher or SuiteLauncher()
        self.parser = parser or ResultParser()
        self.poll_interval = poll_interval
        self.suite_timeout = suite_timeout
        self.on_signal = on_signal or _ignore_signal
        self.cancel_event = cancel_event

        self.peak_running = 0
        self._aggregator = SummaryAggregator(on_outcome=self._signal_outcome)

    def run(
        self,
        suites: Sequence[SuiteDescriptor],
        concurrency_limit: Optional[int] = None,
    ) -> Summary:
        """Run every suite to completion and return the aggregated summary.

        Raises:
            ConfigurationError: If the concurrency limit is not a positive integer
        """
        limit = self.concurrency_limit if concurrency_limit is None else concurrency_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ConfigurationError(f"Concurrency limit must be a positive integer, got {limit!r}")

        pending: deque[SuiteDescriptor] = deque(suites)
        running: list[RunningSuite] = []
        completed: list[str] = []
        summary = Summary()
        self.peak_running = 0

        logger.debug("Scheduling %d suites with concurrency %d", len(pending), limit)

        try:
            while pending or running:
                if self.cancel_event is not None and self.cancel_event.is_set():
                    logger.warning("Run cancelled with %d suites running", len(running))
                    self._cancel(running, summary)
                    break

                time.sleep(self.poll_interval)

                while pending and len(running) < limit:
                    descriptor = pending.popleft()
                    suite = self._start(descriptor, summary)
                    if suite is None:
                        completed.append(descriptor.name)
                        continue
                    running.append(suite)
                    self.peak_running = max(self.peak_running, len(running))

                for suite in list(running):
                    if not self.launcher.has_exited(suite):
                        if self._timed_out(suite):
                            self._expire(suite, summary)
                            running.remove(suite)
                            completed.append(suite.name)
                        continue

                    self._complete(suite, summary)
                    running.remove(suite)
                    completed.append(suite.name)
        except KeyboardInterrupt:
            logger.warning("Interrupted with %d suites running", len(running))
            self._cancel(running, summary)
        except BaseException:
            logger.error("Run aborted; tearing down %d running suites", len(running))
            self._cancel(running, summary)
            raise

        summary.suites_completed = len(completed)
        logger.debug(
            "Finished %d suites: %d tests, %d failures, %d errors",
            len(completed),
            summary.total_tests,
            len(summary.failures),
            len(summary.errors),
        )
        return summary

    def _start(self, descriptor: SuiteDescriptor, summary: Summary) -> Optional[RunningSuite]:
        """Launch a suite; a launch failure is recorded and the suite is done."""
        self.on_signal(SUITE_STARTED)
        try:
            return self.launcher.launch(descriptor)
        except LaunchError as e:
            logger.warning("%s", e)
            summary.exit_codes[descriptor.name] = None
            self._record_suite_error(descriptor.name, e, summary)
            self.on_signal(SUITE_FINISHED)
            return None

    def _complete(self, suite: RunningSuite, summary: Summary) -> None:
        """Parse, fold and release an exited suite."""
        summary.exit_codes[suite.name] = self.launcher.reap(suite)
        try:
            outcomes = self.parser.parse_file(suite.descriptor.output_path, suite.name)
        except ParseError as e:
            logger.warning("%s (exit status %s)", e, suite.exit_code)
            self._record_suite_error(
                suite.name, e, summary, console=self.launcher.console_tail(suite)
            )
        except Exception as e:
            # A parser bug is charged to this suite only
            logger.exception("Unexpected error parsing output of %s", suite.name)
            error = ParseError(suite.name, f"{type(e).__name__}: {e}")
            self._record_suite_error(
                suite.name, error, summary, console=self.launcher.console_tail(suite)
            )
        else:
            self._aggregator.fold(outcomes, suite.name, summary)
        finally:
            self.launcher.release(suite)

        self.on_signal(SUITE_FINISHED)

    def _timed_out(self, suite: RunningSuite) -> bool:
        if self.suite_timeout is None:
            return False
        return time.monotonic() - suite.start_time > self.suite_timeout

    def _expire(self, suite: RunningSuite, summary: Summary) -> None:
        """Kill a suite that ran past the timeout and record it as an error."""
        try:
            summary.exit_codes[suite.name] = self.launcher.terminate(suite)
            error = SuiteTimeoutError(suite.name, f"timed out after {self.suite_timeout} seconds")
            logger.warning("%s", error)
            self._record_suite_error(
                suite.name, error, summary, console=self.launcher.console_tail(suite)
            )
        finally:
            self.launcher.release(suite)
        self.on_signal(SUITE_FINISHED)

    def _cancel(self, running: list[RunningSuite], summary: Summary) -> None:
        """Tear down every running suite and mark the summary cancelled."""
        for suite in running:
            try:
                summary.exit_codes[suite.name] = self.launcher.terminate(suite)
            finally:
                self.launcher.release(suite)
        running.clear()
        summary.cancelled = True

    def _record_suite_error(
        self,
        suite_name: str,
        error: SuiteError,
        summary: Summary,
        console: str = "",
    ) -> None:
        """Fold a single synthetic error outcome for a suite that produced no results."""
        message = f"{type(error).__name__}: {error.message}"
        if console:
            message = f"{message}\n{console}"

        outcome = TestOutcome(
            suite_name=suite_name,
            test_name=suite_name,
            status=TestStatus.ERROR,
            duration=0.0,
            message=message,
        )
        self._aggregator.fold([outcome], suite_name, summary)

    def _signal_outcome(self, outcome: TestOutcome) -> None:
        self.on_signal(outcome.status.signal)


def run(
    suites: Sequence[SuiteDescriptor],
    concurrency_limit: int,
    on_signal: Optional[Callable[[str], None]] = None,
) -> Summary:
    """Run suites with a default launcher and parser."""
    return ProcessPoolScheduler(concurrency_limit, on_signal=on_signal).run(suites)
