"""Suite result parsing.

A suite writes its results as a stream of JSON event records laid end to
end with no separator between them, e.g.::

    {"event":"suiteStart","suite":"FooTest","tests":2}{"event":"test",...}

That stream is not itself valid JSON. It is first reframed into one text
frame per record and then each frame is decoded.
"""

import json
import logging
from pathlib import Path
from typing import Any

from suiterunner.core.models import TestOutcome, TestStatus, TraceFrame
from suiterunner.errors import ParseError

logger = logging.getLogger(__name__)

SKIPPED_MESSAGE = "Skipped Test"


def split_frames(text: str) -> list[str]:
    """Cut a stream of adjacent JSON objects into one string per object.

    Whitespace between objects is allowed. Braces inside string literals are
    not counted.

    Raises:
        ValueError: On stray characters between objects or an unterminated object
    """
    frames = []
    depth = 0
    start = 0
    in_string = False
    escaped = False

    for pos, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if depth == 0:
            if char.isspace():
                continue
            if char != "{":
                raise ValueError(f"unexpected {char!r} between records at offset {pos}")
            start = pos
            depth = 1
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                frames.append(text[start : pos + 1])

    if depth or in_string:
        raise ValueError(f"unterminated record starting at offset {start}")

    return frames


def reframe(text: str) -> str:
    """Rewrite a stream of adjacent records as a single JSON array."""
    return "[" + ",".join(split_frames(text)) + "]"


class ResultParser:
    """Parses the event records a suite process leaves in its output artifact."""

    status_map = {
        "pass": TestStatus.PASS,
        "fail": TestStatus.FAIL,
        "error": TestStatus.ERROR,
    }

    def parse(self, raw_output: bytes, suite_name: str) -> list[TestOutcome]:
        """Parse raw artifact contents into test outcomes, in record order.

        Args:
            raw_output: Bytes written by the suite process
            suite_name: Suite the outcomes are attributed to

        Returns:
            One TestOutcome per ``test`` event

        Raises:
            ParseError: If the payload is not a sequence of well-formed records
        """
        try:
            text = raw_output.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(suite_name, f"output is not valid UTF-8: {e}") from e

        try:
            frames = split_frames(text)
        except ValueError as e:
            raise ParseError(suite_name, f"malformed record stream: {e}") from e

        if not frames:
            raise ParseError(suite_name, "output contains no records")

        outcomes = []
        for index, frame in enumerate(frames):
            try:
                record = json.loads(frame)
            except (ValueError, RecursionError) as e:
                raise ParseError(suite_name, f"record {index} does not decode: {e}") from e

            if not isinstance(record, dict) or not isinstance(record.get("event"), str):
                raise ParseError(suite_name, f"record {index} has no event kind")

            if record["event"] != "test":
                continue

            outcomes.append(self._parse_test_record(record, index, suite_name))

        logger.debug("Parsed %d outcomes from %d records for %s", len(outcomes), len(frames), suite_name)
        return outcomes

    def parse_file(self, path: Path | str, suite_name: str) -> list[TestOutcome]:
        """Read an output artifact and parse it.

        Raises:
            ParseError: If the file is missing, unreadable or malformed
        """
        path = Path(path)
        try:
            raw_output = path.read_bytes()
        except FileNotFoundError as e:
            raise ParseError(suite_name, f"output artifact not found: {path}") from e
        except OSError as e:
            raise ParseError(suite_name, f"output artifact unreadable: {e}") from e

        return self.parse(raw_output, suite_name)

    def _parse_test_record(
        self, record: dict[str, Any], index: int, suite_name: str
    ) -> TestOutcome:
        """Convert one ``test`` event into a TestOutcome."""
        test_name = record.get("test")
        if not isinstance(test_name, str):
            raise ParseError(suite_name, f"record {index} has no test name")

        raw_status = record.get("status")
        if not isinstance(raw_status, str):
            raise ParseError(suite_name, f"record {index} has no status")

        duration = record.get("time")
        if isinstance(duration, bool) or not isinstance(duration, (int, float)):
            raise ParseError(suite_name, f"record {index} has non-numeric time {duration!r}")

        message = record.get("message") or None
        if message is not None and not isinstance(message, str):
            message = str(message)

        status = self.status_map.get(raw_status)
        if status is None:
            # Statuses this parser does not know (e.g. "warning") count as errors
            status = TestStatus.ERROR
            message = f"Unknown status {raw_status!r}" + (f": {message}" if message else "")
        elif status == TestStatus.ERROR and message == SKIPPED_MESSAGE:
            # Skips are reported as errors carrying a fixed message
            status = TestStatus.SKIPPED

        return TestOutcome(
            suite_name=suite_name,
            test_name=test_name,
            status=status,
            duration=duration,
            message=message,
            stack_trace=self._parse_trace(record.get("trace"), index, suite_name),
        )

    @staticmethod
    def _parse_trace(trace: Any, index: int, suite_name: str) -> list[TraceFrame] | None:
        """Convert a record's ``trace`` list into TraceFrames."""
        if trace is None:
            return None
        if not isinstance(trace, list):
            raise ParseError(suite_name, f"record {index} has a malformed trace")

        frames = []
        for entry in trace:
            if not isinstance(entry, dict):
                raise ParseError(suite_name, f"record {index} has a malformed trace entry")
            line = entry.get("line")
            if line is None:
                line = 0
            if isinstance(line, bool) or not isinstance(line, int):
                raise ParseError(suite_name, f"record {index} has a malformed trace entry")
            frames.append(TraceFrame(file=str(entry.get("file", "")), line=line))
        return frames
