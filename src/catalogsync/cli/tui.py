"""Terminal UI utilities for picking tables to sync."""

from __future__ import annotations

import questionary

from catalogsync.cli.common.tui_style import QUESTIONARY_STYLE_SELECT

_MAX_TABLE_NAME_WIDTH = 96


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _table_choice_title(full_name: str) -> str:
    """Show the table name first, with its `catalog.schema` dimmed behind it."""
    catalog_schema, _, table = full_name.rpartition(".")
    title = f"{table}  ({catalog_schema})" if catalog_schema else table
    return _truncate(title, _MAX_TABLE_NAME_WIDTH)


def select_tables(table_full_names: list[str]) -> list[str]:
    """Display a checkbox prompt to select tables from a list.

    Args:
        table_full_names: Table full names (`catalog.schema.table`) to choose from.

    Returns:
        The selected full names, or an empty list if none selected.
    """
    choices = [
        questionary.Choice(title=_table_choice_title(name), value=name)
        for name in table_full_names
    ]

    return (
        questionary.checkbox(
            "Select tables to sync:",
            choices=choices,
            style=QUESTIONARY_STYLE_SELECT,
        ).ask()
        or []
    )
