"""Tests for CLI configuration loading."""

import pytest

from bibconv.cli.config import Config, generator_options, load_config


class TestLoadConfig:
    """Test configuration sources and precedence."""

    def test_no_files(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == {}

    def test_user_config(self, user_config, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        user_config("indent: 4\nsort: true\n")

        assert load_config() == {"indent": 4, "sort": True}

    def test_project_config_overrides_user(
        self, user_config, tmp_path, monkeypatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        user_config("indent: 4\ndefault_to: ris\n")
        (tmp_path / ".bibconv.yaml").write_text("indent: 2\n")

        assert load_config() == {"indent": 2, "default_to": "ris"}

    def test_explicit_file_wins(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "bibconv.yaml").write_text("sort: false\n")
        explicit = tmp_path / "custom.yaml"
        explicit.write_text("sort: true\n")

        assert load_config(explicit) == {"sort": True}

    def test_environment_overrides(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "bibconv.yaml").write_text("indent: 8\nsort: true\n")
        monkeypatch.setenv("BIBCONV_INDENT", "\t")
        monkeypatch.setenv("BIBCONV_SORT", "no")

        assert load_config() == {"indent": "\t", "sort": False}

    def test_invalid_explicit_file(self, tmp_path) -> None:
        explicit = tmp_path / "bad.yaml"
        explicit.write_text("invalid: yaml: content:")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(explicit)

    def test_non_mapping_file(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            Config.from_file(path)

    def test_merge_is_deep(self) -> None:
        merged = Config.merge_configs({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}}


class TestGeneratorOptions:
    """Test building generator options from configuration."""

    def test_defaults(self) -> None:
        options = generator_options({})

        assert options.indent == "  "
        assert options.sort is False
        assert options.line_ending == "\n"

    def test_from_config(self) -> None:
        options = generator_options(
            {"indent": 4, "sort": "yes", "line_ending": "\r\n"}
        )

        assert options.indent == "    "
        assert options.sort is True
        assert options.line_ending == "\r\n"

    def test_overrides_win_unless_none(self) -> None:
        options = generator_options(
            {"indent": "\t", "sort": True}, indent="2", sort=None
        )

        assert options.indent == "  "
        assert options.sort is True
