"""Tests for the tripline command line interface."""

from pathlib import Path

from typer.testing import CliRunner

from tripline._cli.main import app

runner = CliRunner()


class TestFormatCommand:
    """Tests for `tripline format`."""

    def test_formats_literal(self) -> None:
        """Should print the rendering of a Python literal."""
        result = runner.invoke(app, ["--no-pyproject", "format", "{'tea': 'chai'}"])

        assert result.exit_code == 0
        assert '{tea:"chai"}' in result.output

    def test_non_literal_is_a_string(self) -> None:
        """Should format text that is not a literal as a string."""
        result = runner.invoke(app, ["--no-pyproject", "format", "chai"])

        assert result.exit_code == 0
        assert '"chai"' in result.output

    def test_max_props(self) -> None:
        """Should truncate containers to --max-props entries."""
        result = runner.invoke(app, ["--no-pyproject", "format", "[1, 2, 3]", "--max-props", "1"])

        assert result.exit_code == 0
        assert "[1,...]" in result.output


class TestEqualCommand:
    """Tests for `tripline equal`."""

    def test_equal_values(self) -> None:
        """Should exit with 0 for deeply equal values."""
        result = runner.invoke(app, ["--no-pyproject", "equal", "{'a': [1]}", "{'a': ['1']}"])

        assert result.exit_code == 0
        assert "deeply equal" in result.output

    def test_different_values(self) -> None:
        """Should exit with 1 and print the failure message."""
        result = runner.invoke(app, ["--no-pyproject", "equal", "[1]", "[2]"])

        assert result.exit_code == 1
        assert "to deeply equal" in result.output

    def test_strict(self) -> None:
        """Should compare types with --strict."""
        result = runner.invoke(app, ["--no-pyproject", "equal", "1", "'1'", "--strict"])

        assert result.exit_code == 1


class TestConfigCommand:
    """Tests for `tripline config`."""

    def test_shows_configured_options(self, tmp_path: Path) -> None:
        """Should show the options loaded from the given pyproject.toml."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.tripline]\nmax_compare_depth = 7\n")

        result = runner.invoke(app, ["--no-pyproject", "config", "--pyproject", str(pyproject)])

        assert result.exit_code == 0
        assert "max_compare_depth" in result.output
        assert "7" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        """Should fail for a pyproject.toml that does not exist."""
        result = runner.invoke(app, ["--no-pyproject", "config", "--pyproject", str(tmp_path / "missing.toml")])

        assert result.exit_code == 1

    def test_invalid_config(self, tmp_path: Path) -> None:
        """Should fail for invalid options."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.tripline]\nmax_compare_depth = 0\n")

        result = runner.invoke(app, ["--no-pyproject", "config", "--pyproject", str(pyproject)])

        assert result.exit_code == 1
