"""Pytest configuration and fixtures for CLI tests."""

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    """Click CLI test runner that invokes the bibconv group."""

    class BibconvCliRunner(CliRunner):
        def invoke(self, args, **kwargs):  # type: ignore
            from bibconv.cli.main import cli

            if isinstance(args, list):
                return super().invoke(cli, args, **kwargs)
            return super().invoke(args, **kwargs)

    return BibconvCliRunner()


@pytest.fixture
def bibtex_file(tmp_path, sample_bibtex):
    path = tmp_path / "refs.bib"
    path.write_text(sample_bibtex, encoding="utf-8")
    return path


@pytest.fixture
def ris_file(tmp_path, sample_ris):
    path = tmp_path / "refs.ris"
    path.write_text(sample_ris, encoding="utf-8")
    return path


@pytest.fixture
def user_config(tmp_path):
    """Write a user config file under the isolated XDG config home."""

    def write(text: str):
        path = tmp_path / "xdg" / "bibconv" / "config.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return write
