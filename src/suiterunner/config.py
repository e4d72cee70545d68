"""Configuration management for SuiteRunner."""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class RunConfig(BaseModel):
    """Suite execution configuration."""

    command: str = Field(
        default="phpunit --log-json {output} {suite}",
        description="Command template; {output} is the result file, {suite} the suite identifier",
    )
    concurrency: int = Field(default=5, description="How many suites to run simultaneously")
    poll_interval: float = Field(default=0.01, description="Seconds between process status checks")
    suite_timeout: Optional[float] = Field(default=None, description="Kill a suite after this many seconds")
    working_directory: str = Field(default=".", description="Directory to run suites in")
    environment: dict[str, str] = Field(default_factory=dict, description="Additional environment variables")
    scratch_dir: Optional[str] = Field(default=None, description="Parent directory for per-run result files")

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Command template cannot be empty")
        for placeholder in ("{output}", "{suite}"):
            if placeholder not in v:
                raise ValueError(f"Command template must contain {placeholder}")
        return v

    @field_validator("concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Concurrency must be at least 1")
        return v

    @field_validator("poll_interval")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Poll interval must be positive")
        return v

    @field_validator("suite_timeout")
    @classmethod
    def validate_suite_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 1:
            raise ValueError("Suite timeout must be at least 1 second")
        return v


class DiscoveryConfig(BaseModel):
    """Suite discovery configuration."""

    tests_directory: str = Field(default=".", description="Directory holding the suite files")
    pattern: str = Field(default="*.php", description="Glob matched against suite file names")
    exclude: list[str] = Field(
        default_factory=lambda: [".svn", "UnderDev"],
        description="Path components that exclude a file from discovery",
    )


class ReportConfig(BaseModel):
    """Report configuration."""

    show_times: bool = Field(default=False, description="List how long each suite took")
    verbose: bool = Field(default=False, description="Include per-test times in the listing")
    slow_threshold: float = Field(default=1.0, description="Tests slower than this are flagged")
    junit_xml: Optional[str] = Field(default=None, description="Write a JUnit XML log to this path")


class SuiteRunnerConfig(BaseModel):
    """Main configuration for SuiteRunner."""

    run: RunConfig = Field(default_factory=RunConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "SuiteRunnerConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "SuiteRunnerConfig":
        """Find and load configuration file, searching up the directory tree."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        config_names = ["suiterunner.json", ".suiterunner.json"]

        current = start_dir.resolve()
        while True:
            for name in config_names:
                config_path = current / name
                if config_path.exists():
                    return cls.from_file(config_path)
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Create suiterunner.json or run 'suiterunner init'"
        )

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)

    def get_absolute_paths(self, base_dir: Path | str | None = None) -> dict[str, Path]:
        """Get absolute paths for the directories the config refers to."""
        if base_dir is None:
            base_dir = Path.cwd()
        else:
            base_dir = Path(base_dir)

        paths = {
            "working_directory": (base_dir / self.run.working_directory).resolve(),
            "tests_directory": (base_dir / self.discovery.tests_directory).resolve(),
        }
        if self.run.scratch_dir:
            paths["scratch_dir"] = (base_dir / self.run.scratch_dir).resolve()
        if self.report.junit_xml:
            paths["junit_xml"] = (base_dir / self.report.junit_xml).resolve()
        return paths


def get_default_config() -> SuiteRunnerConfig:
    """Return a default configuration."""
    return SuiteRunnerConfig(
        run=RunConfig(command="phpunit --log-json {output} {suite}", concurrency=5),
        discovery=DiscoveryConfig(tests_directory="tests"),
    )


def create_example_config(output_path: Path | str) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    config.to_file(output_path)
    return output_path
