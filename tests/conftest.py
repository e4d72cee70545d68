"""Shared fixtures: a fake suite process driven by a JSON plan."""

import json
import shlex
import sys

import pytest

FAKE_SUITE = """
import json
import sys
import time

plan_path, output, suite = sys.argv[1:4]
with open(plan_path) as f:
    plan = json.load(f)[suite]

time.sleep(plan.get("sleep", 0))
if plan.get("stdout"):
    print(plan["stdout"])
if "raw" in plan:
    with open(output, "w") as f:
        f.write(plan["raw"])
elif "records" in plan:
    with open(output, "w") as f:
        f.write("".join(json.dumps(r) for r in plan["records"]))
sys.exit(plan.get("exit", 0))
"""


def make_record(test, status="pass", time=0.01, message="", trace=None, suite="Suite"):
    """Build one ``test`` event record."""
    return {
        "event": "test",
        "suite": suite,
        "test": test,
        "status": status,
        "time": time,
        "trace": trace or [],
        "message": message,
        "output": "",
    }


@pytest.fixture
def record():
    """Factory for ``test`` event records."""
    return make_record


@pytest.fixture
def suite_command(tmp_path):
    """Write a plan for fake suites and return a command template that runs them.

    The plan maps suite name to a dict with optional keys ``records`` (list of
    event records written to the artifact), ``raw`` (string written verbatim),
    ``sleep`` (seconds), ``stdout`` (printed) and ``exit`` (status).
    """
    script = tmp_path / "fake_suite.py"
    script.write_text(FAKE_SUITE)

    def build(plans: dict) -> str:
        plan_path = tmp_path / "plan.json"
        plan_path.write_text(json.dumps(plans))
        return " ".join(
            [
                shlex.quote(sys.executable),
                shlex.quote(str(script)),
                shlex.quote(str(plan_path)),
                "{output}",
                "{suite}",
            ]
        )

    return build
