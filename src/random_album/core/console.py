"""Centralized Rich Console management.

Command handlers print tables (genres, recency window, settings) through the
shared Console so output styling stays in one place.
"""

from typing import Any, Iterable, Sequence

from rich.console import Console
from rich.table import Table

_console: Console | None = None


def get_console() -> Console:
    """Get or create the global Rich Console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_table(
    title: str, columns: Sequence[str], rows: Iterable[Sequence[Any]]
) -> int:
    """Render rows as a Rich table.

    Args:
        title: Table title
        columns: Column headers
        rows: Row values, converted with str()

    Returns:
        Number of rows printed
    """
    table = Table(title=title)
    for column in columns:
        table.add_column(column)

    count = 0
    for row in rows:
        table.add_row(*(str(value) for value in row))
        count += 1

    if count:
        get_console().print(table)
    else:
        get_console().print(f"{title}: (empty)", style="dim")
    return count
