"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from suiterunner.cli import main


def write_config(tmp_path, command, **run):
    tests_dir = tmp_path / "tests"
    tests_dir.mkdir(exist_ok=True)
    config = {
        "run": {"command": command, "scratch_dir": str(tmp_path / "scratch"), **run},
        "discovery": {"tests_directory": "tests", "pattern": "*Test.php"},
    }
    path = tmp_path / "suiterunner.json"
    path.write_text(json.dumps(config))
    return path, tests_dir


class TestCli:
    """Tests for the suiterunner command."""

    def test_help(self):
        """Test that help lists the commands."""
        result = CliRunner().invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "run" in result.output
        assert "init" in result.output

    def test_init(self, tmp_path):
        """Test writing an example configuration."""
        output = tmp_path / "suiterunner.json"

        result = CliRunner().invoke(main, ["init", "--output", str(output)])

        assert result.exit_code == 0
        assert json.loads(output.read_text())["run"]["concurrency"] == 5

    def test_init_refuses_to_overwrite(self, tmp_path):
        """Test that init keeps an existing file without --force."""
        output = tmp_path / "suiterunner.json"
        output.write_text("{}")

        result = CliRunner().invoke(main, ["init", "--output", str(output)])

        assert result.exit_code == 1
        assert output.read_text() == "{}"

    def test_run_all_passing(self, tmp_path, suite_command, record):
        """Test a clean run exits zero."""
        template = suite_command(
            {"ATest.php": {"records": [record("a")]}, "BTest.php": {"records": [record("b")]}}
        )
        config_path, tests_dir = write_config(tmp_path, template)
        (tests_dir / "ATest.php").write_text("")
        (tests_dir / "BTest.php").write_text("")

        result = CliRunner().invoke(main, ["--config", str(config_path), "run", "-c", "2", "-t"])

        assert result.exit_code == 0, result.output
        assert "OK (2 tests)" in result.output
        assert "Suite times:" in result.output
        assert list((tmp_path / "scratch").iterdir()) == []

    def test_run_with_failures(self, tmp_path, suite_command, record):
        """Test that a failing test makes the exit status non-zero."""
        template = suite_command({"ATest.php": {"records": [record("a", "fail", message="nope")]}})
        config_path, tests_dir = write_config(tmp_path, template)
        (tests_dir / "ATest.php").write_text("")
        xml_path = tmp_path / "junit.xml"

        result = CliRunner().invoke(main, ["--config", str(config_path), "run", "-x", str(xml_path)])

        assert result.exit_code == 1
        assert "FAILURES!" in result.output
        assert xml_path.exists()

    def test_run_selected_suites(self, tmp_path, suite_command, record):
        """Test running only the suites given with -s."""
        template = suite_command({"BTest.php": {"records": [record("b"), record("c")]}})
        config_path, tests_dir = write_config(tmp_path, template)
        (tests_dir / "ATest.php").write_text("")

        result = CliRunner().invoke(main, ["--config", str(config_path), "run", "-s", "BTest.php"])

        assert result.exit_code == 0, result.output
        assert "OK (2 tests)" in result.output

    def test_run_without_suites(self, tmp_path, suite_command):
        """Test that finding no suites is a configuration error."""
        config_path, _ = write_config(tmp_path, suite_command({}))

        result = CliRunner().invoke(main, ["--config", str(config_path), "run"])

        assert result.exit_code == 2
        assert "No suites found" in result.output

    def test_run_invalid_concurrency(self, tmp_path, suite_command):
        """Test that a zero concurrency limit aborts before running anything."""
        config_path, tests_dir = write_config(tmp_path, suite_command({}))
        (tests_dir / "ATest.php").write_text("")

        result = CliRunner().invoke(main, ["--config", str(config_path), "run", "-c", "0"])

        assert result.exit_code == 2
        assert "Concurrency limit" in result.output

    def test_run_invalid_config(self, tmp_path):
        """Test that an invalid configuration file exits with a configuration error."""
        config_path = tmp_path / "suiterunner.json"
        config_path.write_text(json.dumps({"run": {"command": "phpunit"}}))

        result = CliRunner().invoke(main, ["--config", str(config_path), "run"])

        assert result.exit_code == 2
