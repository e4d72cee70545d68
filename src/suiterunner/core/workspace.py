"""Per-run scratch space for suite output artifacts."""

import logging
import re
import shlex
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Iterable, Optional

from suiterunner.core.models import SuiteDescriptor
from suiterunner.errors import ConfigurationError

logger = logging.getLogger(__name__)

OUTPUT_PLACEHOLDER = "{output}"
SUITE_PLACEHOLDER = "{suite}"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def expand_command(template: str, output_path: str, suite: str) -> str:
    """Substitute the output path and suite into a command template.

    Both values are shell-quoted. Other braces in the template are left alone.

    Raises:
        ConfigurationError: If the template lacks either placeholder
    """
    for placeholder in (OUTPUT_PLACEHOLDER, SUITE_PLACEHOLDER):
        if placeholder not in template:
            raise ConfigurationError(f"Command template must contain {placeholder}: {template!r}")

    return template.replace(OUTPUT_PLACEHOLDER, shlex.quote(output_path)).replace(
        SUITE_PLACEHOLDER, shlex.quote(suite)
    )


class RunWorkspace:
    """A uniquely named scratch directory that lives for one run.

    Use as a context manager; the directory and anything left in it are
    removed on exit.
    """

    def __init__(self, root: Optional[Path | str] = None, run_id: Optional[str] = None):
        """Initialize the workspace.

        Args:
            root: Parent directory (defaults to the system temp directory)
            run_id: Identifier for this run (defaults to a random one)
        """
        self.root = Path(root) if root else Path(tempfile.gettempdir())
        self.run_id = run_id or uuid.uuid4().hex[:12]
        self.path: Optional[Path] = None

    def __enter__(self) -> "RunWorkspace":
        self.root.mkdir(parents=True, exist_ok=True)
        self.path = Path(tempfile.mkdtemp(prefix=f"suiterunner-{self.run_id}-", dir=self.root))
        logger.debug("Created run workspace %s", self.path)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        """Remove the workspace directory."""
        if self.path is not None:
            shutil.rmtree(self.path, ignore_errors=True)
            logger.debug("Removed run workspace %s", self.path)
            self.path = None

    def artifact_path(self, index: int, suite: str) -> Path:
        """Unique artifact path for the ``index``-th suite."""
        if self.path is None:
            raise RuntimeError("Run workspace has not been created")
        stem = _UNSAFE_CHARS.sub("_", suite).strip("_") or "suite"
        return self.path / f"{index:04d}-{stem}.json"

    def describe(self, suite_ids: Iterable[str], template: str) -> list[SuiteDescriptor]:
        """Build a descriptor for every suite, in the given order."""
        descriptors = []
        for index, suite in enumerate(suite_ids):
            output_path = str(self.artifact_path(index, suite))
            descriptors.append(
                SuiteDescriptor(
                    name=suite,
                    command=expand_command(template, output_path, suite),
                    output_path=output_path,
                )
            )
        return descriptors
