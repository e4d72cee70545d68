"""Data models for suites, test outcomes and run summaries."""

import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class TestStatus(str, Enum):
    """Status of a single test within a suite."""

    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    SKIPPED = "skipped"

    @property
    def signal(self) -> str:
        """Progress character shown for this status."""
        return _STATUS_SIGNALS[self]


_STATUS_SIGNALS = {
    TestStatus.PASS: ".",
    TestStatus.FAIL: "F",
    TestStatus.ERROR: "E",
    TestStatus.SKIPPED: "S",
}


@dataclass(frozen=True)
class TraceFrame:
    """One frame of a failing test's stack trace."""

    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class SuiteDescriptor:
    """A unit of work: one suite, the command that runs it, and where it writes."""

    name: str
    command: str
    output_path: str


@dataclass
class RunningSuite:
    """A launched suite, owned by the scheduler until it completes."""

    descriptor: SuiteDescriptor
    process: subprocess.Popen
    start_time: float
    console_path: Optional[Path] = None
    exit_code: Optional[int] = None

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass
class TestOutcome:
    """The result of one test."""

    suite_name: str
    test_name: str
    status: TestStatus
    duration: float = 0.0
    message: Optional[str] = None
    stack_trace: Optional[list[TraceFrame]] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "suite_name": self.suite_name,
            "test_name": self.test_name,
            "status": self.status.value,
            "duration": self.duration,
            "message": self.message,
            "stack_trace": (
                [{"file": f.file, "line": f.line} for f in self.stack_trace]
                if self.stack_trace is not None
                else None
            ),
        }


@dataclass
class Summary:
    """Aggregated results of a run.

    ``total_tests`` always equals ``passed + skipped + len(failures) + len(errors)``.
    """

    total_tests: int = 0
    passed: int = 0
    skipped: int = 0
    failures: list[TestOutcome] = field(default_factory=list)
    errors: list[TestOutcome] = field(default_factory=list)
    skips: list[TestOutcome] = field(default_factory=list)
    total_cpu_time: float = 0.0
    per_suite_time: dict[str, float] = field(default_factory=dict)
    per_suite_test_times: dict[str, dict[str, float]] = field(default_factory=dict)
    exit_codes: dict[str, Optional[int]] = field(default_factory=dict)
    suites_completed: int = 0
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        """True when no failures and no errors were recorded."""
        return not self.failures and not self.errors

    @property
    def exit_status(self) -> int:
        return 0 if self.succeeded else 1

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_tests": self.total_tests,
            "passed": self.passed,
            "skipped": self.skipped,
            "failures": [o.to_dict() for o in self.failures],
            "errors": [o.to_dict() for o in self.errors],
            "skips": [o.to_dict() for o in self.skips],
            "total_cpu_time": self.total_cpu_time,
            "per_suite_time": dict(self.per_suite_time),
            "per_suite_test_times": {
                suite: dict(times) for suite, times in self.per_suite_test_times.items()
            },
            "exit_codes": dict(self.exit_codes),
            "suites_completed": self.suites_completed,
            "cancelled": self.cancelled,
        }
