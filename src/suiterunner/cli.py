"""Command-line interface for SuiteRunner."""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from suiterunner import __version__
from suiterunner.config import SuiteRunnerConfig, create_example_config, get_default_config
from suiterunner.errors import ConfigurationError

console = Console(highlight=False)

EXIT_CONFIGURATION_ERROR = 2
EXIT_CANCELLED = 130


def print_banner() -> None:
    """Print the SuiteRunner banner."""
    console.print(
        Panel.fit(
            "[bold blue]SuiteRunner[/bold blue] - parallel test-suite runner",
            subtitle=f"v{__version__}",
        )
    )


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_config(config_path: Optional[str]) -> tuple[SuiteRunnerConfig, Path]:
    """Load the configuration, falling back to defaults when none is found."""
    if config_path:
        return SuiteRunnerConfig.from_file(config_path), Path(config_path).resolve().parent
    try:
        return SuiteRunnerConfig.find_and_load(), Path.cwd()
    except FileNotFoundError:
        return get_default_config(), Path.cwd()


@click.group()
@click.version_option(version=__version__, prog_name="suiterunner")
@click.option(
    "--config",
    type=click.Path(exists=False),
    help="Path to configuration file (default: suiterunner.json)",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: Optional[str], debug: bool) -> None:
    """SuiteRunner - run test suites in parallel.

    Each suite runs as its own process; results are collected once every
    suite has finished.

    \b
    Progress output:
      <  a suite has started
      >  a suite has finished
      .  a test passed
      F  a test failed
      E  a test raised an error
      S  a test was skipped
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = config
    configure_logging(debug)


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="suiterunner.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
def init(output: str, force: bool) -> None:
    """Initialize a new SuiteRunner configuration file."""
    print_banner()

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(f"[yellow]Configuration file already exists:[/yellow] {output_path}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        create_example_config(output_path)
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]Created configuration file:[/green] {output_path}")
    console.print("\nNext steps:")
    console.print("  1. Set run.command to the command that runs one suite")
    console.print("  2. Point discovery.tests_directory at your suites")
    console.print("  3. Run [bold]suiterunner run[/bold]")


@main.command()
@click.option("--concurrency", "-c", type=int, help="How many suites to run simultaneously")
@click.option("--suites", "-s", help="Comma-separated suites to run (e.g. -s foo,bar,baz)")
@click.option("--group", "-g", help="Run only suites tagged with @group GROUP")
@click.option("--times", "-t", "show_times", is_flag=True, help="List how long each suite took")
@click.option("--verbose", "-v", is_flag=True, help="With --times, include per-test times")
@click.option("--xml", "-x", "xml_log", type=click.Path(), help="Write a JUnit XML log to this path")
@click.pass_context
def run(
    ctx: click.Context,
    concurrency: Optional[int],
    suites: Optional[str],
    group: Optional[str],
    show_times: bool,
    verbose: bool,
    xml_log: Optional[str],
) -> None:
    """Run test suites in parallel and report the results."""
    from suiterunner.core.discovery import SuiteDiscovery
    from suiterunner.core.executor import SuiteLauncher
    from suiterunner.core.scheduler import ProcessPoolScheduler
    from suiterunner.core.workspace import RunWorkspace
    from suiterunner.report.generator import JUnitReportGenerator
    from suiterunner.report.terminal import TerminalReporter

    print_banner()

    try:
        config, base_dir = load_config(ctx.obj.get("config_path"))
    except (FileNotFoundError, ValidationError, ValueError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(EXIT_CONFIGURATION_ERROR)

    paths = config.get_absolute_paths(base_dir)
    limit = concurrency if concurrency is not None else config.run.concurrency
    show_times = show_times or config.report.show_times
    verbose = verbose or config.report.verbose
    xml_path = Path(xml_log) if xml_log else paths.get("junit_xml")

    discovery = SuiteDiscovery(
        paths["tests_directory"],
        pattern=config.discovery.pattern,
        exclude=config.discovery.exclude,
    )
    suite_ids = discovery.discover(suites=suites.split(",") if suites else None, group=group)

    reporter = TerminalReporter(console, slow_threshold=config.report.slow_threshold)
    scheduler = ProcessPoolScheduler(
        concurrency_limit=limit,
        launcher=SuiteLauncher(
            working_directory=paths["working_directory"],
            environment=config.run.environment,
        ),
        poll_interval=config.run.poll_interval,
        suite_timeout=config.run.suite_timeout,
        on_signal=reporter.signal,
    )

    try:
        if not suite_ids:
            raise ConfigurationError(f"No suites found in {paths['tests_directory']}")

        with RunWorkspace(root=paths.get("scratch_dir")) as workspace:
            descriptors = workspace.describe(suite_ids, config.run.command)
            console.print(f"[dim]Running {len(descriptors)} suites, {limit} at a time[/dim]")

            started = time.monotonic()
            summary = scheduler.run(descriptors)
            wall_time = time.monotonic() - started
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(EXIT_CONFIGURATION_ERROR)

    if show_times:
        reporter.print_times(summary, wall_time, verbose=verbose)

    reporter.print_summary(summary, wall_time)

    if xml_path:
        written = JUnitReportGenerator().generate(summary, xml_path)
        console.print(f"[green]XML log written:[/green] {written}")

    if summary.cancelled:
        sys.exit(EXIT_CANCELLED)
    sys.exit(summary.exit_status)


if __name__ == "__main__":
    main()
