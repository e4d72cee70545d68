"""Core suite scheduling functionality."""

from suiterunner.core.aggregator import SummaryAggregator
from suiterunner.core.discovery import SuiteDiscovery
from suiterunner.core.executor import SuiteLauncher
from suiterunner.core.parser import ResultParser
from suiterunner.core.scheduler import ProcessPoolScheduler
from suiterunner.core.workspace import RunWorkspace

__all__ = [
    "ProcessPoolScheduler",
    "ResultParser",
    "RunWorkspace",
    "SuiteDiscovery",
    "SuiteLauncher",
    "SummaryAggregator",
]
