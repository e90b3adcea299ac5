"""Rich rendering of conversion reports."""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from bibconv.core.models import ConversionStats, ConversionWarning, Severity

SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def warnings_table(
    warnings: list[ConversionWarning], title: str = "Warnings", limit: int = 50
) -> Table:
    """Table with one row per warning, most severe first."""
    order = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}
    shown = sorted(warnings, key=lambda w: order[w.severity])[:limit]

    table = Table(title=title)
    table.add_column("Severity")
    table.add_column("Entry", style="cyan")
    table.add_column("Type")
    table.add_column("Message")

    for warning in shown:
        table.add_row(
            Text(warning.severity.value, style=SEVERITY_STYLES[warning.severity]),
            warning.entry_id,
            warning.type.value,
            warning.message,
        )

    if len(warnings) > limit:
        table.caption = f"... and {len(warnings) - limit} more"
    return table


def stats_table(stats: ConversionStats) -> Table:
    """Summary table of conversion statistics."""
    table = Table(title="Conversion Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Entries", str(stats.total))
    table.add_row(
        "Successful",
        Text(
            str(stats.successful),
            style="green" if stats.successful == stats.total else "yellow",
        ),
    )
    table.add_row(
        "With Warnings",
        Text(
            str(stats.with_warnings),
            style="yellow" if stats.with_warnings else "green",
        ),
    )
    table.add_row(
        "Failed", Text(str(stats.failed), style="red" if stats.failed else "green")
    )
    return table


def print_report(
    console: Console,
    warnings: list[ConversionWarning],
    stats: ConversionStats | None = None,
) -> None:
    """Print statistics and warnings, skipping empty sections."""
    if stats is not None:
        console.print(stats_table(stats))
    if warnings:
        console.print(warnings_table(warnings))
