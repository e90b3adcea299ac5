"""Configuration management for the CLI."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from bibconv.generators import GeneratorOptions

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}


class Config:
    """Configuration management for the CLI application.

    Recognized keys: ``indent`` (string or number of spaces), ``sort``,
    ``line_ending`` and ``default_to`` (target format used when ``--to`` is
    omitted).
    """

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ValueError(f"Error reading config file: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "bibconv" / "config.yaml")

        # Project config
        paths.append(Path(".bibconv.yaml"))
        paths.append(Path("bibconv.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def get_config_paths() -> list[Path]:
    """Get configuration paths in precedence order."""
    return Config.get_config_paths()


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Default locations are merged in order (later files win), then ``path``
    if given, then ``BIBCONV_INDENT`` / ``BIBCONV_SORT``.

    Raises:
        ValueError: If the explicitly given file cannot be loaded.
    """
    config = {}

    for default_path in get_config_paths():
        if default_path.exists():
            try:
                file_config = Config.from_file(default_path)
            except ValueError as e:
                logger.warning(f"Ignoring config file {default_path}: {e}")
                continue
            config = Config.merge_configs(config, file_config)

    if path is not None:
        config = Config.merge_configs(config, Config.from_file(path))

    # Override with environment variables
    env_overrides: dict[str, Any] = {}
    if indent := os.environ.get("BIBCONV_INDENT"):
        env_overrides["indent"] = indent
    if sort := os.environ.get("BIBCONV_SORT"):
        env_overrides["sort"] = sort.strip().lower() in TRUE_VALUES

    return Config.merge_configs(config, env_overrides)


def _indent(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return " " * value
    text = str(value)
    return " " * int(text) if text.isdigit() else text


def generator_options(config: dict[str, Any], **overrides: Any) -> GeneratorOptions:
    """Build generator options from configuration; non-None overrides win."""
    values: dict[str, Any] = {}
    if "indent" in config:
        values["indent"] = _indent(config["indent"])
    if "sort" in config:
        value = config["sort"]
        values["sort"] = (
            value if isinstance(value, bool) else str(value).lower() in TRUE_VALUES
        )
    if "line_ending" in config:
        values["line_ending"] = str(config["line_ending"])

    for key, value in overrides.items():
        if value is not None:
            values[key] = _indent(value) if key == "indent" else value

    return GeneratorOptions(**values)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
