"""Suite discovery."""

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class SuiteDiscovery:
    """Finds the suites to run in a tests directory."""

    def __init__(
        self,
        tests_directory: Path,
        pattern: str = "*.php",
        exclude: Iterable[str] = (),
    ):
        """Initialize suite discovery.

        Args:
            tests_directory: Directory holding the suite files
            pattern: Glob matched against suite file names
            exclude: Path components that disqualify a file (e.g. ``UnderDev``)
        """
        self.tests_directory = Path(tests_directory)
        self.pattern = pattern
        self.exclude = set(exclude)

    def discover(
        self,
        suites: Optional[Iterable[str]] = None,
        group: Optional[str] = None,
    ) -> list[str]:
        """Return the sorted, deduplicated suite identifiers to run.

        Explicit ``suites`` win over ``group``; with neither, every file in
        the tests directory matching the pattern is a suite.
        """
        if suites:
            found = [s.strip() for s in suites if s.strip()]
        elif group:
            found = self._discover_group(group)
        else:
            found = self._discover_files()

        result = sorted(set(found))
        logger.debug("Discovered %d suites in %s", len(result), self.tests_directory)
        return result

    def _discover_files(self) -> list[str]:
        """Suite files directly inside the tests directory."""
        if not self.tests_directory.is_dir():
            return []
        return [
            path.name
            for path in self.tests_directory.glob(self.pattern)
            if path.is_file() and path.name not in self.exclude
        ]

    def _discover_group(self, group: str) -> list[str]:
        """Files under the tests directory tagged ``@group <group>``."""
        if not self.tests_directory.is_dir():
            return []

        tag = re.compile(r"@group\s+" + re.escape(group) + r"\b")
        found = []
        for path in self.tests_directory.rglob(self.pattern):
            relative = path.relative_to(self.tests_directory)
            if not path.is_file() or self.exclude.intersection(relative.parts):
                continue
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", path, e)
                continue
            if tag.search(text):
                found.append(relative.as_posix())
        return found
