"""Suite process launcher.

This module starts one suite command as a child process and gives the
scheduler non-blocking control over it. Output is never captured through
pipes; stdout and stderr go to a console log file next to the artifact so a
chatty suite cannot stall on a full pipe.
"""

import logging
import os
import signal
import subprocess
import time
from pathlib import Path
from typing import Optional

from suiterunner.core.models import RunningSuite, SuiteDescriptor
from suiterunner.errors import LaunchError

logger = logging.getLogger(__name__)

CONSOLE_TAIL_BYTES = 2000

_POSIX = os.name == "posix"


class SuiteLauncher:
    """Launches suite commands and manages their processes."""

    def __init__(
        self,
        working_directory: Optional[Path] = None,
        environment: Optional[dict[str, str]] = None,
        kill_grace_seconds: float = 5.0,
    ):
        """Initialize the launcher.

        Args:
            working_directory: Directory to run commands in (default: current)
            environment: Additional environment variables to set
            kill_grace_seconds: How long a terminated process gets before it is killed
        """
        self.working_directory = working_directory
        self.environment = environment or {}
        self.kill_grace_seconds = kill_grace_seconds

    def launch(self, descriptor: SuiteDescriptor) -> RunningSuite:
        """Start a suite's command.

        Raises:
            LaunchError: If the process could not be started
        """
        env = {**os.environ, **self.environment}
        # Appended rather than substituted, so it never collides with an artifact
        console_path = Path(f"{descriptor.output_path}.console.log")

        try:
            with open(console_path, "wb") as console:
                # shell=True so templates may use pipes, redirects and env expansion
                process = subprocess.Popen(
                    descriptor.command,
                    shell=True,
                    stdin=subprocess.DEVNULL,
                    stdout=console,
                    stderr=subprocess.STDOUT,
                    cwd=self.working_directory,
                    env=env,
                    start_new_session=_POSIX,
                )
        except OSError as e:
            console_path.unlink(missing_ok=True)
            raise LaunchError(descriptor.name, f"could not start {descriptor.command!r}: {e}") from e

        logger.debug("Launched %s (pid %d): %s", descriptor.name, process.pid, descriptor.command)
        return RunningSuite(
            descriptor=descriptor,
            process=process,
            start_time=time.monotonic(),
            console_path=console_path,
        )

    @staticmethod
    def has_exited(suite: RunningSuite) -> bool:
        """Non-blocking check whether the suite's process has finished."""
        return suite.process.poll() is not None

    def reap(self, suite: RunningSuite) -> Optional[int]:
        """Collect an exited process and record its exit code."""
        suite.exit_code = suite.process.wait()
        logger.debug("%s exited with status %s", suite.name, suite.exit_code)
        return suite.exit_code

    def terminate(self, suite: RunningSuite) -> Optional[int]:
        """Stop a running suite, killing it if it ignores SIGTERM."""
        if suite.process.poll() is None:
            self._send(suite, signal.SIGTERM)
            try:
                suite.process.wait(timeout=self.kill_grace_seconds)
            except subprocess.TimeoutExpired:
                logger.warning("%s ignored terminate; killing pid %d", suite.name, suite.process.pid)
                self._send(suite, signal.SIGKILL if _POSIX else signal.SIGTERM)
        return self.reap(suite)

    @staticmethod
    def _send(suite: RunningSuite, sig: int) -> None:
        """Signal the suite's whole process group, so the shell's children go too."""
        if not _POSIX:
            suite.process.send_signal(sig)
            return
        try:
            os.killpg(suite.process.pid, sig)
        except ProcessLookupError:
            pass

    @staticmethod
    def console_tail(suite: RunningSuite, limit: int = CONSOLE_TAIL_BYTES) -> str:
        """Return the last ``limit`` bytes the suite wrote to stdout/stderr."""
        if suite.console_path is None:
            return ""
        try:
            data = suite.console_path.read_bytes()
        except OSError:
            return ""
        return data[-limit:].decode("utf-8", errors="replace").strip()

    @staticmethod
    def release(suite: RunningSuite) -> None:
        """Delete the suite's output artifact and console log."""
        Path(suite.descriptor.output_path).unlink(missing_ok=True)
        if suite.console_path is not None:
            suite.console_path.unlink(missing_ok=True)
