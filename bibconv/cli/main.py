"""Main CLI entry point and application setup."""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
from click.exceptions import Exit
from rich.console import Console
from rich.table import Table

from bibconv import __version__
from bibconv.converter import (
    convert as convert_content,
    detect_format,
    get_supported_formats,
    validate as validate_content,
)
from bibconv.core.fields import BibFormat
from bibconv.generators import GENERATORS
from bibconv.parsers import PARSERS

from .config import generator_options, load_config
from .output import print_report, warnings_table

FORMAT_CHOICE = click.Choice([f.value for f in BibFormat], case_sensitive=False)


@dataclass
class Context:
    """CLI context that holds shared resources."""

    console: Console
    err_console: Console
    config: dict[str, Any] = field(default_factory=dict)
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(
    no_color: bool = False, stderr: bool = False, width: int | None = None
) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        stderr=stderr,
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def read_input(path: str) -> str:
    """Read a UTF-8 input file, ``-`` meaning standard input."""
    if path == "-":
        return click.get_text_stream("stdin").read()
    return Path(path).read_text(encoding="utf-8")


def resolve_format(content: str, fmt: str | None) -> BibFormat:
    """Given format, or the detected one.

    Raises:
        click.UsageError: If no format was given and detection fails.
    """
    if fmt:
        return BibFormat.coerce(fmt)
    detected = detect_format(content)
    if detected is None:
        raise click.UsageError(
            "Could not detect input format; pass it with --from/-f"
        )
    return detected


class BibconvGroup(click.Group):
    """Custom group that reports errors through the console."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "err_console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "err_console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {e}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=BibconvGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(
    version=__version__, prog_name="bibconv", message="bibconv version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """Bibliography format converter.

    Converts between BibTeX, BibLaTeX, RIS, CSL-JSON and EndNote XML.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    try:
        config_data = load_config(config)
    except ValueError as e:
        if debug:
            raise
        click.echo(f"Error loading config file: {e}", err=True)
        ctx.exit(1)

    ctx.obj = Context(
        console=create_console(no_color=no_color),
        err_console=create_console(no_color=no_color, stderr=True),
        config=config_data,
        debug=debug,
    )


@cli.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(allow_dash=True))
@click.option("--from", "-f", "from_format", type=FORMAT_CHOICE, help="Input format")
@click.option("--to", "-t", "to_format", type=FORMAT_CHOICE, help="Output format")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to a file instead of standard output",
)
@click.option("--sort/--no-sort", default=None, help="Sort entries by id")
@click.option("--indent", help="Indentation string or number of spaces")
@click.option("--report", is_flag=True, help="Print a conversion summary")
@click.pass_context
def convert(
    ctx: click.Context,
    input_path: str,
    from_format: str | None,
    to_format: str | None,
    output: Path | None,
    sort: bool | None,
    indent: str | None,
    report: bool,
) -> None:
    """Convert INPUT to another format."""
    obj: Context = ctx.obj
    to_format = to_format or obj.config.get("default_to")
    if not to_format:
        raise click.UsageError("Missing target format; pass it with --to/-t")

    content = read_input(input_path)
    source = resolve_format(content, from_format)
    options = generator_options(obj.config, sort=sort, indent=indent)

    converted = convert_content(content, source, to_format, options)
    result = converted.result

    if output:
        output.write_text(converted.output, encoding="utf-8")
        obj.err_console.print(
            f"[green]✓[/green] Wrote {result.stats.successful} entries to {output}"
        )
    else:
        click.echo(converted.output, nl=not converted.output.endswith("\n"))

    if report:
        print_report(obj.err_console, result.warnings, result.stats)
    elif result.warnings:
        obj.err_console.print(warnings_table(result.warnings))

    if result.has_errors:
        ctx.exit(1)


@cli.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(allow_dash=True))
@click.option("--format", "-f", "fmt", type=FORMAT_CHOICE, help="Input format")
@click.pass_context
def validate(ctx: click.Context, input_path: str, fmt: str | None) -> None:
    """Check the syntax of INPUT without converting it."""
    obj: Context = ctx.obj
    content = read_input(input_path)
    source = resolve_format(content, fmt)

    warnings = validate_content(content, source)
    if not warnings:
        obj.console.print(f"[green]✓[/green] Valid {source.value}")
        return

    obj.console.print(warnings_table(warnings, title=f"Validation ({source.value})"))
    if any(w.is_error for w in warnings):
        ctx.exit(1)


@cli.command()
@click.argument("input_path", metavar="INPUT", type=click.Path(allow_dash=True))
@click.pass_context
def detect(ctx: click.Context, input_path: str) -> None:
    """Print the detected format of INPUT."""
    detected = detect_format(read_input(input_path))
    if detected is None:
        ctx.obj.err_console.print("[yellow]Could not detect format[/yellow]")
        ctx.exit(1)
    click.echo(detected.value)


@cli.command()
@click.pass_context
def formats(ctx: click.Context) -> None:
    """List supported formats."""
    table = Table(title="Supported Formats")
    table.add_column("Format", style="cyan")
    table.add_column("Read", justify="center")
    table.add_column("Write", justify="center")

    for fmt in get_supported_formats():
        table.add_row(
            fmt.value,
            "✓" if fmt in PARSERS else "",
            "✓" if fmt in GENERATORS else "",
        )
    ctx.obj.console.print(table)


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
