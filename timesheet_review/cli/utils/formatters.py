"""Output formatting utilities for CLI."""

from typing import Any, List

import click


def format_success(message: str) -> str:
    """Format a success message with green color."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message with red color."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message with yellow color."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message with blue color."""
    return click.style(f"ℹ {message}", fg="blue")


def format_status(status: str) -> str:
    """Color a timesheet status for listings.

    Args:
        status: Status value (draft, submitted, approved, rejected)

    Returns:
        Styled status; unknown statuses are returned unstyled
    """
    colors = {
        "draft": "white",
        "submitted": "yellow",
        "approved": "green",
        "rejected": "red",
    }
    color = colors.get(status)
    return click.style(status, fg=color) if color else status


def format_table(headers: List[str], rows: List[List[Any]], max_width: int = 40) -> str:
    """Format data as a plain-text table.

    Cells longer than ``max_width`` are truncated.

    Args:
        headers: Column headers
        rows: Data rows (each row is a list of cell values)
        max_width: Maximum width for each column

    Returns:
        Formatted table as a string
    """
    if not headers:
        return ""

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(col_widths)]):
            col_widths[i] = max(col_widths[i], len(str(cell)))
    col_widths = [min(w, max_width) for w in col_widths]

    separator = "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"

    def _render(cells: List[Any]) -> str:
        padded = [
            f" {str(cell)[:width]:<{width}} " for cell, width in zip(cells, col_widths)
        ]
        return "|" + "|".join(padded) + "|"

    lines = [separator, _render(headers), separator]
    if rows:
        lines.extend(_render(row) for row in rows)
        lines.append(separator)
    return "\n".join(lines)
