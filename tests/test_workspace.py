"""Tests for run workspaces and command expansion."""

import shlex

import pytest

from suiterunner.core.workspace import RunWorkspace, expand_command
from suiterunner.errors import ConfigurationError


class TestExpandCommand:
    """Tests for expand_command."""

    def test_substitutes_both_placeholders(self):
        """Test substituting output path and suite."""
        command = expand_command("phpunit --log-json {output} {suite}", "/tmp/out.json", "FooTest.php")

        assert command == "phpunit --log-json /tmp/out.json FooTest.php"

    def test_quotes_values(self):
        """Test that values with spaces are shell-quoted."""
        command = expand_command("run {output} {suite}", "/tmp/my dir/out.json", "Foo Test.php")

        assert shlex.split(command) == ["run", "/tmp/my dir/out.json", "Foo Test.php"]

    def test_other_braces_untouched(self):
        """Test that unrelated braces in the template survive."""
        command = expand_command("sh -c 'x={}' {output} {suite}", "o", "s")

        assert command == "sh -c 'x={}' o s"

    @pytest.mark.parametrize("template", ["phpunit {suite}", "phpunit --log-json {output}"])
    def test_missing_placeholder(self, template):
        """Test that both placeholders are required."""
        with pytest.raises(ConfigurationError):
            expand_command(template, "o", "s")


class TestRunWorkspace:
    """Tests for RunWorkspace."""

    def test_creates_and_removes_directory(self, tmp_path):
        """Test the workspace lifecycle."""
        with RunWorkspace(root=tmp_path, run_id="abc") as workspace:
            path = workspace.path
            assert path.is_dir()
            assert path.parent == tmp_path
            assert path.name.startswith("suiterunner-abc-")
            (path / "leftover.json").write_text("{}")

        assert not path.exists()
        assert workspace.path is None

    def test_removes_directory_on_error(self, tmp_path):
        """Test that the workspace is swept when the run raises."""
        with pytest.raises(RuntimeError):
            with RunWorkspace(root=tmp_path) as workspace:
                path = workspace.path
                raise RuntimeError("boom")

        assert not path.exists()

    def test_runs_do_not_collide(self, tmp_path):
        """Test that two workspaces with the same run id get separate directories."""
        with RunWorkspace(root=tmp_path, run_id="same") as first:
            with RunWorkspace(root=tmp_path, run_id="same") as second:
                assert first.path != second.path

    def test_describe(self, tmp_path):
        """Test building descriptors in order with unique artifact paths."""
        with RunWorkspace(root=tmp_path) as workspace:
            descriptors = workspace.describe(
                ["b/FooTest.php", "b_FooTest.php", "BarTest.php"], "phpunit --log-json {output} {suite}"
            )

            assert [d.name for d in descriptors] == ["b/FooTest.php", "b_FooTest.php", "BarTest.php"]
            paths = [d.output_path for d in descriptors]
            assert len(set(paths)) == 3
            assert all(p.startswith(str(workspace.path)) for p in paths)
            assert descriptors[2].command == f"phpunit --log-json {paths[2]} BarTest.php"

    def test_artifact_path_requires_workspace(self, tmp_path):
        """Test that paths cannot be handed out before the workspace exists."""
        with pytest.raises(RuntimeError):
            RunWorkspace(root=tmp_path).artifact_path(0, "FooTest")
