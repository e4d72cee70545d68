"""Exceptions raised by SuiteRunner."""


class SuiteRunnerError(Exception):
    """Base class for all SuiteRunner errors."""

    pass


class ConfigurationError(SuiteRunnerError):
    """Raised when a run is misconfigured. Nothing is launched."""

    pass


class SuiteError(SuiteRunnerError):
    """An error attributed to a single suite.

    The scheduler turns these into a synthetic error outcome for the suite
    instead of aborting the run.
    """

    def __init__(self, suite_name: str, message: str):
        super().__init__(f"{suite_name}: {message}")
        self.suite_name = suite_name
        self.message = message


class LaunchError(SuiteError):
    """Raised when a suite's child process could not be started."""

    pass


class ParseError(SuiteError):
    """Raised when a suite's output artifact is missing or malformed."""

    pass


class SuiteTimeoutError(SuiteError):
    """Raised when a suite runs longer than the configured timeout."""

    pass
