"""JUnit XML log generation using Jinja2 templates."""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from suiterunner.core.models import Summary, TestOutcome, TestStatus


class JUnitReportGenerator:
    """Writes a run summary as a JUnit-style XML log."""

    def __init__(self, title: str = "suiterunner"):
        """Initialize the report generator.

        Args:
            title: Name of the enclosing ``testsuites`` element
        """
        self.title = title

        template_dir = Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["seconds"] = self._format_seconds

    def render(self, summary: Summary, generated_at: Optional[datetime] = None) -> str:
        """Render the XML log for a summary."""
        context = self._prepare_context(summary, generated_at or datetime.now())
        template = self.env.get_template("junit.xml")
        return template.render(**context)

    def generate(self, summary: Summary, output_path: Path | str) -> Path:
        """Render the XML log and write it to ``output_path``."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(summary), encoding="utf-8")
        return output_path

    def _prepare_context(self, summary: Summary, generated_at: datetime) -> dict[str, Any]:
        """Group outcomes by suite for the template."""
        marked: dict[tuple[str, str], TestOutcome] = {
            (o.suite_name, o.test_name): o
            for o in summary.failures + summary.errors + summary.skips
        }

        suites = []
        for suite_name, test_times in summary.per_suite_test_times.items():
            cases = []
            for test_name, duration in test_times.items():
                outcome = marked.get((suite_name, test_name))
                cases.append(
                    {
                        "name": test_name,
                        "time": duration,
                        "status": outcome.status.value if outcome else None,
                        "message": (outcome.message or "") if outcome else "",
                        "trace": [str(f) for f in (outcome.stack_trace or [])] if outcome else [],
                    }
                )
            suites.append(
                {
                    "name": suite_name,
                    "time": summary.per_suite_time.get(suite_name, 0.0),
                    "tests": len(cases),
                    "failures": sum(1 for c in cases if c["status"] == TestStatus.FAIL.value),
                    "errors": sum(1 for c in cases if c["status"] == TestStatus.ERROR.value),
                    "skipped": sum(1 for c in cases if c["status"] == TestStatus.SKIPPED.value),
                    "cases": cases,
                }
            )

        return {
            "title": self.title,
            "generated_at": generated_at.isoformat(timespec="seconds"),
            "total": summary.total_tests,
            "failures": len(summary.failures),
            "errors": len(summary.errors),
            "skipped": summary.skipped,
            "time": summary.total_cpu_time,
            "suites": suites,
        }

    @staticmethod
    def _format_seconds(value: float) -> str:
        """Format a duration in seconds for an XML attribute."""
        return f"{value:.6f}"
