"""Run reporting: terminal output and JUnit XML logs."""

from suiterunner.report.generator import JUnitReportGenerator
from suiterunner.report.terminal import TerminalReporter

__all__ = ["JUnitReportGenerator", "TerminalReporter"]
