"""Tests for the command-line interface.

Covers the global options, configuration loading and the convert,
validate, detect and formats commands.
"""

import json


class TestCLIEntryPoint:
    """Test the main CLI entry point."""

    def test_help(self, cli_runner):
        """Test --help flag."""
        result = cli_runner.invoke(["--help"])

        assert result.exit_code == 0
        assert "Bibliography format converter" in result.output
        assert "convert" in result.output

    def test_version(self, cli_runner):
        result = cli_runner.invoke(["--version"])

        assert result.exit_code == 0
        assert "bibconv version 0.1.0" in result.output

    def test_invalid_config_file(self, cli_runner, tmp_path):
        """Test error handling for invalid config file."""
        bad_config = tmp_path / "bad_config.yaml"
        bad_config.write_text("invalid: yaml: content:")

        result = cli_runner.invoke(["--config", str(bad_config), "formats"])

        assert result.exit_code == 1
        assert "Error loading config file" in result.output

    def test_broken_user_config_is_ignored(self, cli_runner, user_config):
        user_config("- not\n- a mapping\n")

        result = cli_runner.invoke(["formats"])

        assert result.exit_code == 0


class TestConvertCommand:
    """Test the convert command."""

    def test_convert_to_stdout(self, cli_runner, bibtex_file):
        result = cli_runner.invoke(["convert", str(bibtex_file), "--to", "ris"])

        assert result.exit_code == 0
        assert "TY  - JOUR" in result.output
        assert "TY  - BOOK" in result.output

    def test_convert_to_file(self, cli_runner, ris_file, tmp_path):
        target = tmp_path / "out.json"

        result = cli_runner.invoke(
            ["convert", str(ris_file), "-t", "csl-json", "-o", str(target)]
        )

        assert result.exit_code == 0
        assert "Wrote 2 entries" in result.output
        items = json.loads(target.read_text(encoding="utf-8"))
        assert [item["type"] for item in items] == ["article-journal", "book"]

    def test_explicit_source_format(self, cli_runner, tmp_path, sample_ris):
        source = tmp_path / "refs.txt"
        source.write_text(sample_ris, encoding="utf-8")

        result = cli_runner.invoke(
            ["convert", str(source), "--from", "ris", "--to", "bibtex"]
        )

        assert result.exit_code == 0
        assert "@article{smith2024," in result.output

    def test_stdin(self, cli_runner, sample_ris):
        result = cli_runner.invoke(
            ["convert", "-", "-f", "ris", "-t", "csl-json"], input=sample_ris
        )

        assert result.exit_code == 0
        assert '"id": "smith2024"' in result.output

    def test_missing_target(self, cli_runner, bibtex_file):
        result = cli_runner.invoke(["convert", str(bibtex_file)])

        assert result.exit_code == 2
        assert "Missing target format" in result.output

    def test_default_target_from_config(self, cli_runner, bibtex_file, user_config):
        user_config("default_to: csl-json\nindent: 4\n")

        result = cli_runner.invoke(["convert", str(bibtex_file)])

        assert result.exit_code == 0
        assert '\n    {\n        "id": "smith2024"' in result.output

    def test_options(self, cli_runner, bibtex_file):
        result = cli_runner.invoke(
            ["convert", str(bibtex_file), "-t", "bibtex", "--sort", "--indent", "4"]
        )

        assert result.exit_code == 0
        assert result.output.index("@book{knuth1984") < result.output.index(
            "@article{smith2024"
        )
        assert "\n    title = " in result.output

    def test_undetectable_input(self, cli_runner, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("just some notes", encoding="utf-8")

        result = cli_runner.invoke(["convert", str(source), "-t", "ris"])

        assert result.exit_code == 2
        assert "Could not detect input format" in result.output

    def test_errors_set_exit_code(self, cli_runner, tmp_path):
        source = tmp_path / "broken.bib"
        source.write_text(
            "@misc{good, title = {Fine}}\n@misc{good, title = {Again}}\n",
            encoding="utf-8",
        )

        result = cli_runner.invoke(["convert", str(source), "-t", "ris"])

        assert result.exit_code == 1
        assert "TI  - Fine" in result.output
        assert "Duplicate citation key" in result.output

    def test_report(self, cli_runner, tmp_path, sample_csl):
        source = tmp_path / "refs.json"
        source.write_text(sample_csl, encoding="utf-8")

        result = cli_runner.invoke(
            ["convert", str(source), "-t", "bibtex", "--report"]
        )

        assert result.exit_code == 0
        assert "Conversion Summary" in result.output
        assert "type-downgrade" in result.output

    def test_missing_input_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            ["convert", str(tmp_path / "missing.bib"), "-t", "ris"]
        )

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestValidateCommand:
    """Test the validate command."""

    def test_valid(self, cli_runner, bibtex_file):
        result = cli_runner.invoke(["validate", str(bibtex_file)])

        assert result.exit_code == 0
        assert "Valid bibtex" in result.output

    def test_warnings_only(self, cli_runner, tmp_path):
        """Warnings are reported without failing validation."""
        source = tmp_path / "open.ris"
        source.write_text("TY  - JOUR\nTI  - Open\n", encoding="utf-8")

        result = cli_runner.invoke(["validate", str(source), "--format", "ris"])

        assert result.exit_code == 0
        assert "Unclosed entry" in result.output
        assert "Valid ris" not in result.output

    def test_invalid(self, cli_runner, tmp_path):
        source = tmp_path / "broken.bib"
        source.write_text("@misc{open, title = {Open}\n", encoding="utf-8")

        result = cli_runner.invoke(["validate", str(source), "--format", "bibtex"])

        assert result.exit_code == 1
        assert "unclosed brace" in result.output


class TestDetectCommand:
    """Test the detect command."""

    def test_detect(self, cli_runner, ris_file):
        result = cli_runner.invoke(["detect", str(ris_file)])

        assert result.exit_code == 0
        assert result.output.strip() == "ris"

    def test_undetectable(self, cli_runner, tmp_path):
        source = tmp_path / "empty.txt"
        source.write_text("", encoding="utf-8")

        result = cli_runner.invoke(["detect", str(source)])

        assert result.exit_code == 1
        assert "Could not detect format" in result.output


class TestFormatsCommand:
    def test_lists_every_format(self, cli_runner):
        result = cli_runner.invoke(["formats"])

        assert result.exit_code == 0
        assert "Supported Formats" in result.output
        for name in ["bibtex", "biblatex", "ris", "endnote", "csl-json"]:
            assert name in result.output
