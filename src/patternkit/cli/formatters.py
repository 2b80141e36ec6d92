"""
CLI-specific formatting functions for human-readable output.

This module handles presentation formatting for the CLI, including:
- JSON and YAML documents
- Rich tables for row-shaped results
"""

import io
import json
from typing import Any, Dict, List, Optional

import yaml

# Keys holding the row list of each command's result
ROW_KEYS = ("resolutions", "results", "reports", "steps")


def format_output(data: Any, format_type: str) -> str:
    """Format data according to the specified format type."""
    if format_type == "yaml":
        return yaml.safe_dump(_plain(data), default_flow_style=False, sort_keys=False).rstrip("\n")
    elif format_type == "table":
        return format_table_output(data)
    else:
        return json.dumps(data, indent=2, default=str)


def format_table_output(data: Any) -> str:
    """Format data as a table."""
    rows = _find_rows(data)
    if rows is None:
        # Fallback to JSON for unknown data structures
        return json.dumps(data, indent=2, default=str)
    if not rows:
        return "No results."

    from rich.console import Console
    from rich.table import Table

    table = Table(show_header=True, header_style="bold magenta")
    columns = _collect_columns(rows)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*[_cell(row.get(column)) for column in columns])

    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    console.print(table)
    return buffer.getvalue().rstrip("\n")


def _find_rows(data: Any) -> Optional[List[Dict[str, Any]]]:
    if not isinstance(data, dict):
        return None
    for key in ROW_KEYS:
        rows = data.get(key)
        if isinstance(rows, list) and all(isinstance(row, dict) for row in rows):
            return rows
    return None


def _collect_columns(rows: List[Dict[str, Any]]) -> List[str]:
    columns: List[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    return columns


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (list, dict)):
        return json.dumps(value, default=str)
    return str(value)


def _plain(data: Any) -> Any:
    """Reduce data to types yaml.safe_dump accepts."""
    if isinstance(data, dict):
        return {str(key): _plain(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_plain(item) for item in data]
    if data is None or isinstance(data, (str, int, float, bool)):
        return data
    return str(data)
