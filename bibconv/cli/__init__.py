"""bibconv command-line interface.

Built with Click and Rich; configuration is read from YAML files.
"""

from bibconv.cli.main import cli

__all__ = ["cli"]
