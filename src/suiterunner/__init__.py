"""
SuiteRunner - parallel test-suite runner.

This package provides tools to:
- Discover test suites in a project
- Run many suites at once as child processes, up to a concurrency limit
- Collect each suite's structured results into one summary
- Report totals, timings and failures on the terminal or as a JUnit XML log
"""

__version__ = "0.2.1"
__author__ = "SuiteRunner Team"
